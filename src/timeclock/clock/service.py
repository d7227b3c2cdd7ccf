from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional

from ..common.datetime_utils import day_bounds, ensure_aware, now_utc
from ..core.enums import DayStatus, EntryType
from ..core.exceptions import ConflictError, ValidationError
from ..schedules.repository import ScheduleRepository
from ..workday.consolidator import WorkdayConsolidator
from ..workday.model import WorkdaySummary
from ..workday.repository import WorkdayRepository
from .model import ClockEvent
from .repository import ClockEventRepository
from .validator import DUPLICATE_CLOCK_IN_MESSAGE, ClockEventValidator, order_events

logger = logging.getLogger(__name__)


class _DayLock:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class DayLocks:
    """One lock per (employee_id, date) within this process.

    Validation and append must happen under the same lock or two concurrent
    taps can both pass the duplicate/transition checks. An entry lives only
    while someone holds or waits on it. Across processes the clock-event
    storage rejects a second ``clock_in`` for the day.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], _DayLock] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, employee_id: str, date: str) -> Iterator[None]:
        key = (employee_id, date)
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _DayLock()
            entry.holders += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[key]


class ClockService:
    def __init__(
        self,
        events: ClockEventRepository,
        workdays: WorkdayRepository,
        schedules: ScheduleRepository | None = None,
        *,
        validator: ClockEventValidator | None = None,
        consolidator: WorkdayConsolidator | None = None,
        now: Optional[Callable[[], datetime]] = None,
        locks: DayLocks | None = None,
    ):
        self._events = events
        self._workdays = workdays
        self._schedules = schedules
        self._now = now or now_utc
        self._validator = validator or ClockEventValidator(now=self._now)
        self._consolidator = consolidator or WorkdayConsolidator(day_boundary_timezone=self._validator.timezone)
        self._locks = locks or DayLocks()

    def day_events(self, employee_id: str, date: str) -> list[ClockEvent]:
        start, end = day_bounds(date, self._validator.timezone)
        return order_events(self._events.list_for_employee_between(employee_id=employee_id, start=start, end=end))

    def record(
        self,
        employee_id: str,
        entry_type: EntryType | str,
        *,
        timestamp: datetime | None = None,
        source: str | None = None,
    ) -> tuple[ClockEvent, WorkdaySummary]:
        """Validate and store a clock action, then refresh the day's summary.

        Raises ValidationError with the user-facing message on rejection.
        """
        entry_type = EntryType(entry_type)
        timestamp = ensure_aware(timestamp or self._now())
        date = self._validator.day_key(timestamp)

        with self._locks.hold(employee_id, date):
            existing = self.day_events(employee_id, date)
            verdict = self._validator.validate(entry_type, timestamp, existing)
            if not verdict.is_valid:
                logger.info("rejected %s for %s on %s: %s", entry_type.value, employee_id, date, verdict.message)
                raise ValidationError(verdict.message)

            try:
                stored = self._events.append(
                    ClockEvent(employee_id=employee_id, entry_type=entry_type, timestamp=timestamp, source=source),
                    date=date,
                )
            except ConflictError:
                # another worker stored the day's clock_in between our read and insert
                logger.warning("storage rejected concurrent %s for %s on %s", entry_type.value, employee_id, date)
                raise ValidationError(DUPLICATE_CLOCK_IN_MESSAGE) from None
            logger.debug("stored %s for %s at %s", entry_type.value, employee_id, timestamp.isoformat())

            try:
                summary = self._refresh_summary(employee_id, date)
            except Exception:
                logger.warning(
                    "event %s stored for %s on %s but the workday summary was not updated; recompute the day",
                    stored.event_id,
                    employee_id,
                    date,
                    exc_info=True,
                )
                raise

        return stored, summary

    def current_status(self, employee_id: str, *, now: datetime | None = None) -> DayStatus:
        date = self._validator.day_key(now or self._now())
        return self._validator.get_current_day_status(self.day_events(employee_id, date))

    def _refresh_summary(self, employee_id: str, date: str) -> WorkdaySummary:
        shift = None
        if self._schedules:
            shift = self._schedules.get_for_employee_and_date(employee_id=employee_id, date=date)

        summary = self._consolidator.consolidate_clock_entries(
            employee_id, date, self.day_events(employee_id, date), shift
        )
        return self._workdays.upsert(summary)
