from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, from_utc_naive, to_utc_naive
from .model import ClockEvent
from .repository import ClockEventRepository


class MySQLClockEventRepository(ClockEventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employee_between(self, *, employee_id: str, start: datetime, end: datetime) -> Sequence[ClockEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, id_user, entry_type, timestamp, source, auto_generated
                FROM clock_entries
                WHERE id_user=%s AND timestamp >= %s AND timestamp < %s
                ORDER BY timestamp, seq
                """,
                (employee_id, to_utc_naive(start), to_utc_naive(end)),
            )
            rows = fetchall(cur)
            return [
                ClockEvent(
                    employee_id=str(r["id_user"]),
                    entry_type=r["entry_type"],
                    timestamp=from_utc_naive(r["timestamp"]),
                    source=r.get("source"),
                    event_id=str(r["id"]),
                    auto_generated=bool(r.get("auto_generated") or False),
                )
                for r in rows
            ]

    def append(self, event: ClockEvent, *, date: str) -> ClockEvent:
        event_id = event.event_id or str(uuid.uuid4())
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO clock_entries(id, id_user, entry_type, timestamp, work_date, source, auto_generated)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        event_id,
                        event.employee_id,
                        event.entry_type.value,
                        to_utc_naive(event.timestamp),
                        date,
                        event.source,
                        int(event.auto_generated),
                    ),
                )
        except mysql.connector.IntegrityError as e:
            # uq_clock_in_per_day: another process stored this day's clock_in first
            if e.errno != errorcode.ER_DUP_ENTRY:
                raise
            raise ConflictError(f"{event.entry_type.value} already stored for {event.employee_id} on {date}") from e
        return replace(event, event_id=event_id)

    def delete_auto_generated(self, *, employee_id: str, start: datetime, end: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM clock_entries
                WHERE id_user=%s AND timestamp >= %s AND timestamp < %s AND auto_generated=1
                """,
                (employee_id, to_utc_naive(start), to_utc_naive(end)),
            )
            return int(cur.rowcount or 0)
