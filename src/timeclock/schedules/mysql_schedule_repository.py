from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_hhmm
from .model import ScheduledShift
from .repository import ScheduleRepository


def _to_shift(r: Dict[str, Any]) -> ScheduledShift:
    return ScheduledShift(
        shift_id=str(r["id"]),
        employee_id=str(r["id_user"]),
        date=str(r["date"]),
        start_time=normalize_mysql_hhmm(r.get("start_time")),
        end_time=normalize_mysql_hhmm(r.get("end_time")),
        schedule_type=r.get("schedule_type"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_id: str, date: str) -> Optional[ScheduledShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, id_user, date, start_time, end_time, schedule_type
                FROM schedules
                WHERE id_user=%s AND date=%s
                ORDER BY start_time
                LIMIT 1
                """,
                (employee_id, date),
            )
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def list_range(self, *, employee_id: str, start: str, end: str) -> Sequence[ScheduledShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, id_user, date, start_time, end_time, schedule_type
                FROM schedules
                WHERE id_user=%s AND date >= %s AND date <= %s
                ORDER BY date, start_time
                """,
                (employee_id, start, end),
            )
            return [_to_shift(r) for r in fetchall(cur)]
