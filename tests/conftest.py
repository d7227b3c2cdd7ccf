from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

import pytest

from timeclock.clock.model import ClockEvent
from timeclock.core.enums import EntryType
from timeclock.core.exceptions import ConflictError
from timeclock.schedules.model import ScheduledShift
from timeclock.workday.model import WorkdaySummary


class InMemoryClockEvents:
    """Mirrors the one-clock_in-per-day unique index of the MySQL table."""

    def __init__(self):
        self.events: list[ClockEvent] = []
        self._dates: dict[str, str] = {}
        self._id = 0
        self._lock = threading.Lock()

    def list_for_employee_between(self, *, employee_id: str, start: datetime, end: datetime):
        return [e for e in self.events if e.employee_id == employee_id and start <= e.timestamp < end]

    def append(self, event: ClockEvent, *, date: str) -> ClockEvent:
        with self._lock:
            if event.entry_type == EntryType.CLOCK_IN and any(
                e.employee_id == event.employee_id
                and e.entry_type == EntryType.CLOCK_IN
                and self._dates[e.event_id] == date
                for e in self.events
            ):
                raise ConflictError(f"clock_in already stored for {event.employee_id} on {date}")
            self._id += 1
            stored = replace(event, event_id=str(self._id))
            self._dates[stored.event_id] = date
            self.events.append(stored)
            return stored

    def delete_auto_generated(self, *, employee_id: str, start: datetime, end: datetime) -> int:
        with self._lock:
            keep = [
                e
                for e in self.events
                if not (e.employee_id == employee_id and start <= e.timestamp < end and e.auto_generated)
            ]
            removed = len(self.events) - len(keep)
            self.events = keep
            return removed


class InMemoryWorkdays:
    def __init__(self):
        self._by_key: dict[tuple[str, str], WorkdaySummary] = {}
        self._id = 0

    def get_for_employee_and_date(self, *, employee_id: str, date: str) -> Optional[WorkdaySummary]:
        return self._by_key.get((employee_id, date))

    def get_by_id(self, workday_id: str) -> Optional[WorkdaySummary]:
        return next((w for w in self._by_key.values() if w.workday_id == workday_id), None)

    def list_range(self, *, employee_id: str, start: str, end: str):
        items = [w for (emp, d), w in self._by_key.items() if emp == employee_id and start <= d <= end]
        return sorted(items, key=lambda w: w.date)

    def upsert(self, summary: WorkdaySummary) -> WorkdaySummary:
        existing = self._by_key.get((summary.employee_id, summary.date))
        if existing:
            workday_id = existing.workday_id
        else:
            self._id += 1
            workday_id = f"wd-{self._id}"
        stored = replace(summary, workday_id=workday_id)
        self._by_key[(summary.employee_id, summary.date)] = stored
        return stored

    def delete(self, workday_id: str) -> bool:
        for key, w in list(self._by_key.items()):
            if w.workday_id == workday_id:
                del self._by_key[key]
                return True
        return False


class InMemorySchedules:
    def __init__(self, shifts=()):
        self.shifts: list[ScheduledShift] = list(shifts)

    def get_for_employee_and_date(self, *, employee_id: str, date: str) -> Optional[ScheduledShift]:
        return next((s for s in self.shifts if s.employee_id == employee_id and s.date == date), None)

    def list_range(self, *, employee_id: str, start: str, end: str):
        return [s for s in self.shifts if s.employee_id == employee_id and start <= s.date <= end]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_event():
    def _make(entry_type, hhmm: str, *, day: str = "2025-03-10", employee_id: str = "emp-1") -> ClockEvent:
        return ClockEvent(
            employee_id=employee_id,
            entry_type=EntryType(entry_type),
            timestamp=datetime.fromisoformat(f"{day}T{hhmm}:00+00:00"),
        )

    return _make


@pytest.fixture
def events_repo() -> InMemoryClockEvents:
    return InMemoryClockEvents()


@pytest.fixture
def workdays_repo() -> InMemoryWorkdays:
    return InMemoryWorkdays()


@pytest.fixture
def schedules_repo() -> InMemorySchedules:
    return InMemorySchedules(
        [ScheduledShift(employee_id="emp-1", date="2025-03-10", start_time="09:00", end_time="17:00", shift_id="sh-1")]
    )
