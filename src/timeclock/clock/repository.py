from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import ClockEvent


class ClockEventRepository(Protocol):
    def list_for_employee_between(self, *, employee_id: str, start: datetime, end: datetime) -> Sequence[ClockEvent]:
        """Events with ``start <= timestamp < end`` in insertion order."""

        raise NotImplementedError

    def append(self, event: ClockEvent, *, date: str) -> ClockEvent:
        """Persist a new event and return it with its ``event_id`` set.

        ``date`` is the calendar day the event belongs to. Storage allows one
        ``clock_in`` per employee and day and raises ``ConflictError`` for a
        second one, so the rule holds across processes.
        """

        raise NotImplementedError

    def delete_auto_generated(self, *, employee_id: str, start: datetime, end: datetime) -> int:
        """Administrative cleanup of events created for manual workdays."""

        raise NotImplementedError
