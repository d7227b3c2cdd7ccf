from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import WorkdaySummary


class WorkdayRepository(Protocol):
    def get_for_employee_and_date(self, *, employee_id: str, date: str) -> Optional[WorkdaySummary]:
        raise NotImplementedError

    def get_by_id(self, workday_id: str) -> Optional[WorkdaySummary]:
        raise NotImplementedError

    def list_range(self, *, employee_id: str, start: str, end: str) -> Sequence[WorkdaySummary]:
        raise NotImplementedError

    def upsert(self, summary: WorkdaySummary) -> WorkdaySummary:
        """Create or replace the summary of ``(employee_id, date)``.

        Returns the stored summary with ``workday_id`` set.
        """

        raise NotImplementedError

    def delete(self, workday_id: str) -> bool:
        raise NotImplementedError
