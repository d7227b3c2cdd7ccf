from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Dict, Optional, Sequence

from ..core.enums import WorkdayStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_utc_naive, to_utc_naive
from .model import WorkdaySummary
from .repository import WorkdayRepository

_COLUMNS = """
    id, id_user, date, shift_id, worked_minutes, break_minutes,
    overtime_minutes, status, start_time, end_time
"""


def _to_summary(r: Dict[str, Any]) -> WorkdaySummary:
    return WorkdaySummary(
        workday_id=str(r["id"]),
        employee_id=str(r["id_user"]),
        date=str(r["date"]),
        shift_id=r.get("shift_id"),
        worked_minutes=int(r.get("worked_minutes") or 0),
        break_minutes=int(r.get("break_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        status=WorkdayStatus(r["status"]),
        start_time=from_utc_naive(r.get("start_time")),
        end_time=from_utc_naive(r.get("end_time")),
    )


class MySQLWorkdayRepository(WorkdayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_id: str, date: str) -> Optional[WorkdaySummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_workday WHERE id_user=%s AND date=%s",
                (employee_id, date),
            )
            r = fetchone(cur)
            return _to_summary(r) if r else None

    def get_by_id(self, workday_id: str) -> Optional[WorkdaySummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM daily_workday WHERE id=%s", (workday_id,))
            r = fetchone(cur)
            return _to_summary(r) if r else None

    def list_range(self, *, employee_id: str, start: str, end: str) -> Sequence[WorkdaySummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_workday
                WHERE id_user=%s AND date >= %s AND date <= %s
                ORDER BY date
                """,
                (employee_id, start, end),
            )
            return [_to_summary(r) for r in fetchall(cur)]

    def upsert(self, summary: WorkdaySummary) -> WorkdaySummary:
        # (id_user, date) carries a unique index
        workday_id = summary.workday_id or str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO daily_workday(
                    id, id_user, date, shift_id, worked_minutes, break_minutes,
                    overtime_minutes, status, start_time, end_time
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    shift_id=VALUES(shift_id),
                    worked_minutes=VALUES(worked_minutes),
                    break_minutes=VALUES(break_minutes),
                    overtime_minutes=VALUES(overtime_minutes),
                    status=VALUES(status),
                    start_time=VALUES(start_time),
                    end_time=VALUES(end_time)
                """,
                (
                    workday_id,
                    summary.employee_id,
                    summary.date,
                    summary.shift_id,
                    summary.worked_minutes,
                    summary.break_minutes,
                    summary.overtime_minutes,
                    summary.status.value,
                    to_utc_naive(summary.start_time),
                    to_utc_naive(summary.end_time),
                ),
            )
            cur.execute("SELECT id FROM daily_workday WHERE id_user=%s AND date=%s", (summary.employee_id, summary.date))
            r = fetchone(cur)
        return replace(summary, workday_id=str(r["id"]) if r else workday_id)

    def delete(self, workday_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM daily_workday WHERE id=%s", (workday_id,))
            return cur.rowcount > 0
