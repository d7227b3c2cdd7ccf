"""Consolidation of a day's clock events into a ``WorkdaySummary``.

Input lists are expected in timestamp order and already accepted by the
validator; this module does not re-check transitions. Orphan closers
(a ``clock_out`` without an open ``clock_in``, a ``break_end`` without an
open ``break_start``) contribute nothing.

Worked minutes are the gross ``clock_in`` -> ``clock_out`` span; break
minutes are reported separately and are not subtracted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, Optional, Sequence, Union

from ..clock.model import ClockEvent, ValidationResult
from ..common.datetime_utils import format_minutes, hhmm_to_minutes, minute_of_day, resolve_timezone
from ..core.constants import DEFAULT_DAY_BOUNDARY_TIMEZONE, SCHEDULE_TOLERANCE_MINUTES
from ..core.enums import ClockSource, EntryType, WorkdayStatus
from ..schedules.model import ScheduledShift
from .model import ScheduleComparison, WorkdaySummary, WorkedTime

logger = logging.getLogger(__name__)


def _paired_minutes(events: Iterable[ClockEvent], opener: EntryType, closer: EntryType) -> int:
    total = 0
    opened_at: Optional[datetime] = None

    for event in events:
        if event.entry_type == opener:
            opened_at = event.timestamp
        elif event.entry_type == closer and opened_at is not None:
            total += int((event.timestamp - opened_at).total_seconds() // 60)
            opened_at = None

    return total


class WorkdayConsolidator:
    def __init__(
        self,
        *,
        day_boundary_timezone: Union[str, tzinfo] = DEFAULT_DAY_BOUNDARY_TIMEZONE,
        tolerance_minutes: int = SCHEDULE_TOLERANCE_MINUTES,
    ):
        self._tz = resolve_timezone(day_boundary_timezone)
        self._tolerance = int(tolerance_minutes)

    def calculate_worked_minutes(self, ordered_events: Sequence[ClockEvent]) -> int:
        return _paired_minutes(ordered_events, EntryType.CLOCK_IN, EntryType.CLOCK_OUT)

    def calculate_break_minutes(self, ordered_events: Sequence[ClockEvent]) -> int:
        return _paired_minutes(ordered_events, EntryType.BREAK_START, EntryType.BREAK_END)

    def calculate_worked_time(self, ordered_events: Sequence[ClockEvent]) -> WorkedTime:
        return WorkedTime.from_minutes(self.calculate_worked_minutes(ordered_events))

    def calculate_break_time(self, ordered_events: Sequence[ClockEvent]) -> WorkedTime:
        return WorkedTime.from_minutes(self.calculate_break_minutes(ordered_events))

    def calculate_overtime_minutes(self, worked_minutes: int, scheduled_shift: Optional[ScheduledShift] = None) -> int:
        """Minutes worked beyond the scheduled span; never negative."""
        if not scheduled_shift or not scheduled_shift.start_time or not scheduled_shift.end_time:
            return 0

        scheduled_minutes = hhmm_to_minutes(scheduled_shift.end_time) - hhmm_to_minutes(scheduled_shift.start_time)
        return max(0, worked_minutes - scheduled_minutes)

    def determine_workday_status(self, ordered_events: Sequence[ClockEvent]) -> WorkdayStatus:
        if ordered_events and ordered_events[-1].entry_type == EntryType.CLOCK_OUT:
            return WorkdayStatus.CLOSED
        return WorkdayStatus.OPEN

    def extract_start_and_end_times(
        self, ordered_events: Sequence[ClockEvent]
    ) -> tuple[Optional[datetime], Optional[datetime]]:
        start = next((e.timestamp for e in ordered_events if e.entry_type == EntryType.CLOCK_IN), None)
        end = None
        for event in ordered_events:
            if event.entry_type == EntryType.CLOCK_OUT:
                end = event.timestamp
        return start, end

    def consolidate_clock_entries(
        self,
        employee_id: str,
        date: str,
        ordered_events: Sequence[ClockEvent],
        scheduled_shift: Optional[ScheduledShift] = None,
    ) -> WorkdaySummary:
        worked = self.calculate_worked_minutes(ordered_events)
        start, end = self.extract_start_and_end_times(ordered_events)

        summary = WorkdaySummary(
            employee_id=employee_id,
            date=date,
            worked_minutes=worked,
            break_minutes=self.calculate_break_minutes(ordered_events),
            overtime_minutes=self.calculate_overtime_minutes(worked, scheduled_shift),
            status=self.determine_workday_status(ordered_events),
            start_time=start,
            end_time=end,
            shift_id=scheduled_shift.shift_id if scheduled_shift else None,
        )
        logger.debug(
            "consolidated %s/%s: worked=%s break=%s overtime=%s status=%s",
            employee_id,
            date,
            summary.worked_minutes,
            summary.break_minutes,
            summary.overtime_minutes,
            summary.status.value,
        )
        return summary

    def compare_with_schedule(
        self,
        workday: WorkdaySummary,
        schedules: Sequence[ScheduledShift],
        events: Optional[Sequence[ClockEvent]] = None,
    ) -> ScheduleComparison:
        shift = next(
            (s for s in schedules if s.employee_id == workday.employee_id and s.date == workday.date),
            None,
        )

        # Without a plan (or without activity) the day cannot be late.
        if not shift or not shift.start_time or not shift.end_time or not events:
            return ScheduleComparison(is_on_time=True, minutes_difference=0, started_early=False, finished_late=False)

        start, end = self.extract_start_and_end_times(events)
        if start is None:
            return ScheduleComparison(is_on_time=False, minutes_difference=0, started_early=False, finished_late=False)

        actual_start = minute_of_day(start, self._tz)
        actual_end = minute_of_day(end, self._tz) if end is not None else 0

        start_difference = actual_start - hhmm_to_minutes(shift.start_time)
        end_difference = actual_end - hhmm_to_minutes(shift.end_time)

        return ScheduleComparison(
            is_on_time=abs(start_difference) <= self._tolerance and abs(end_difference) <= self._tolerance,
            minutes_difference=abs(start_difference) + abs(end_difference),
            started_early=start_difference < -self._tolerance,
            finished_late=end_difference > self._tolerance,
        )

    def validate_manual_workday(self, start_time: str, end_time: str, break_minutes: int) -> ValidationResult:
        start = hhmm_to_minutes(start_time)
        end = hhmm_to_minutes(end_time)

        if end <= start:
            return ValidationResult(False, "La hora de fin debe ser posterior a la hora de inicio")
        if break_minutes < 0:
            return ValidationResult(False, "Los minutos de pausa no pueden ser negativos")
        if break_minutes >= end - start:
            return ValidationResult(
                False, "Los minutos de pausa no pueden ser mayores o iguales al total de la jornada"
            )

        return ValidationResult(True, "Jornada manual válida")

    def calculate_manual_workday_minutes(self, start_time: str, end_time: str, break_minutes: int) -> int:
        return hhmm_to_minutes(end_time) - hhmm_to_minutes(start_time) - break_minutes

    def build_manual_events(
        self,
        employee_id: str,
        start: datetime,
        end: datetime,
        break_minutes: int,
    ) -> list[ClockEvent]:
        """Auto-generated events for a manually entered day.

        The break, if any, is centred in the span.
        """
        events = [self._auto_event(employee_id, EntryType.CLOCK_IN, start)]

        if break_minutes > 0:
            total_minutes = int((end - start).total_seconds() // 60)
            half = total_minutes / 2
            events.append(
                self._auto_event(employee_id, EntryType.BREAK_START, start + timedelta(minutes=half - break_minutes / 2))
            )
            events.append(
                self._auto_event(employee_id, EntryType.BREAK_END, start + timedelta(minutes=half + break_minutes / 2))
            )

        events.append(self._auto_event(employee_id, EntryType.CLOCK_OUT, end))
        return events

    def find_workday(self, employee_id: str, date: str, workdays: Iterable[WorkdaySummary]) -> Optional[WorkdaySummary]:
        return next((w for w in workdays if w.employee_id == employee_id and w.date == date), None)

    def calculate_total_minutes_for_period(self, workdays: Iterable[WorkdaySummary]) -> int:
        return sum(w.worked_minutes or 0 for w in workdays)

    def calculate_average_daily_minutes(self, workdays: Sequence[WorkdaySummary]) -> int:
        if not workdays:
            return 0
        return self.calculate_total_minutes_for_period(workdays) // len(workdays)

    def format_minutes(self, total_minutes: int) -> str:
        return format_minutes(total_minutes)

    @staticmethod
    def _auto_event(employee_id: str, entry_type: EntryType, timestamp: datetime) -> ClockEvent:
        return ClockEvent(
            employee_id=employee_id,
            entry_type=entry_type,
            timestamp=timestamp,
            source=ClockSource.WEB.value,
            auto_generated=True,
        )
