from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ScheduledShift


class ScheduleRepository(Protocol):
    """Read-only access to planned shifts; schedule CRUD lives elsewhere."""

    def get_for_employee_and_date(self, *, employee_id: str, date: str) -> Optional[ScheduledShift]:
        raise NotImplementedError

    def list_range(self, *, employee_id: str, start: str, end: str) -> Sequence[ScheduledShift]:
        raise NotImplementedError
