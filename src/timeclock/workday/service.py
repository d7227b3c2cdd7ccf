from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..clock.repository import ClockEventRepository
from ..clock.service import DayLocks
from ..clock.validator import ClockEventValidator, order_events
from ..common.datetime_utils import combine_local, day_bounds
from ..common.validators import require_hhmm
from ..core.enums import WorkdayStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..schedules.repository import ScheduleRepository
from .consolidator import WorkdayConsolidator
from .model import ScheduleComparison, WorkdaySummary
from .repository import WorkdayRepository

logger = logging.getLogger(__name__)

_HAS_CLOCK_ENTRIES_MESSAGE = "La jornada tiene fichajes registrados y no se puede editar"


@dataclass(frozen=True)
class PeriodTotals:
    employee_id: str
    start: str
    end: str
    days: int
    total_minutes: int
    average_daily_minutes: int
    total_hours: str

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "startDate": self.start,
            "endDate": self.end,
            "days": self.days,
            "totalMinutes": self.total_minutes,
            "averageDailyMinutes": self.average_daily_minutes,
            "totalHours": self.total_hours,
        }


class WorkdayService:
    def __init__(
        self,
        workdays: WorkdayRepository,
        events: ClockEventRepository,
        schedules: ScheduleRepository | None = None,
        *,
        validator: ClockEventValidator | None = None,
        consolidator: WorkdayConsolidator | None = None,
        locks: DayLocks | None = None,
    ):
        self._workdays = workdays
        self._events = events
        self._schedules = schedules
        self._validator = validator or ClockEventValidator()
        self._consolidator = consolidator or WorkdayConsolidator(day_boundary_timezone=self._validator.timezone)
        self._locks = locks or DayLocks()

    def get_summary(self, employee_id: str, date: str) -> Optional[WorkdaySummary]:
        return self._workdays.get_for_employee_and_date(employee_id=employee_id, date=date)

    def has_clock_entries(self, employee_id: str, date: str) -> bool:
        return any(not e.auto_generated for e in self._day_events(employee_id, date))

    def history(self, employee_id: str, start: str, end: str) -> Sequence[WorkdaySummary]:
        if end < start:
            raise ValidationError("La fecha de inicio debe ser anterior a la fecha de fin")
        return self._workdays.list_range(employee_id=employee_id, start=start, end=end)

    def recompute(self, employee_id: str, date: str) -> WorkdaySummary:
        """Rebuild the stored summary from the day's events."""
        with self._locks.hold(employee_id, date):
            summary = self._consolidator.consolidate_clock_entries(
                employee_id, date, self._day_events(employee_id, date), self._shift_for(employee_id, date)
            )
            return self._workdays.upsert(summary)

    def create_manual(
        self,
        employee_id: str,
        date: str,
        start_time: str,
        end_time: str,
        break_minutes: int = 0,
    ) -> WorkdaySummary:
        """Store an administrator-entered day and its auto-generated events.

        Replaces a previous manual entry for the same day. Days that already
        hold real clock events cannot be overwritten.
        """
        start_time = require_hhmm(start_time, "startTime")
        end_time = require_hhmm(end_time, "endTime")
        break_minutes = int(break_minutes or 0)

        verdict = self._consolidator.validate_manual_workday(start_time, end_time, break_minutes)
        if not verdict.is_valid:
            raise ValidationError(verdict.message)

        tz = self._validator.timezone
        with self._locks.hold(employee_id, date):
            if self.has_clock_entries(employee_id, date):
                raise ValidationError(_HAS_CLOCK_ENTRIES_MESSAGE)

            day_start, day_end = day_bounds(date, tz)
            self._events.delete_auto_generated(employee_id=employee_id, start=day_start, end=day_end)

            start = combine_local(date, start_time, tz)
            end = combine_local(date, end_time, tz)
            try:
                for event in self._consolidator.build_manual_events(employee_id, start, end, break_minutes):
                    self._events.append(event, date=date)
            except ConflictError:
                # a real clock_in landed after the check above
                self._events.delete_auto_generated(employee_id=employee_id, start=day_start, end=day_end)
                raise ValidationError(_HAS_CLOCK_ENTRIES_MESSAGE) from None

            shift = self._shift_for(employee_id, date)
            worked = self._consolidator.calculate_manual_workday_minutes(start_time, end_time, break_minutes)
            existing = self.get_summary(employee_id, date)
            summary = WorkdaySummary(
                workday_id=existing.workday_id if existing else None,
                employee_id=employee_id,
                date=date,
                worked_minutes=worked,
                break_minutes=break_minutes,
                overtime_minutes=self._consolidator.calculate_overtime_minutes(worked, shift),
                status=WorkdayStatus.CLOSED,
                start_time=start,
                end_time=end,
                shift_id=shift.shift_id if shift else None,
            )
            stored = self._workdays.upsert(summary)

        logger.info("manual workday stored for %s on %s (%s min)", employee_id, date, worked)
        return stored

    def update_manual(self, workday_id: str, start_time: str, end_time: str, break_minutes: int = 0) -> WorkdaySummary:
        """Re-enter the times of an existing manual workday, keeping its id."""
        workday = self._workdays.get_by_id(workday_id)
        if not workday:
            raise NotFoundError("Jornada laboral no encontrada")
        return self.create_manual(workday.employee_id, workday.date, start_time, end_time, break_minutes)

    def delete_manual(self, workday_id: str) -> None:
        workday = self._workdays.get_by_id(workday_id)
        if not workday:
            raise NotFoundError("Jornada laboral no encontrada")

        with self._locks.hold(workday.employee_id, workday.date):
            day_start, day_end = day_bounds(workday.date, self._validator.timezone)
            self._events.delete_auto_generated(employee_id=workday.employee_id, start=day_start, end=day_end)
            self._workdays.delete(workday_id)

    def compare(self, employee_id: str, date: str) -> ScheduleComparison:
        workday = self.get_summary(employee_id, date)
        if not workday:
            raise NotFoundError("Jornada laboral no encontrada")

        shifts = self._schedules.list_range(employee_id=employee_id, start=date, end=date) if self._schedules else []
        return self._consolidator.compare_with_schedule(workday, shifts, self._day_events(employee_id, date))

    def period_totals(self, employee_id: str, start: str, end: str) -> PeriodTotals:
        workdays = list(self.history(employee_id, start, end))
        total = self._consolidator.calculate_total_minutes_for_period(workdays)
        return PeriodTotals(
            employee_id=employee_id,
            start=start,
            end=end,
            days=len(workdays),
            total_minutes=total,
            average_daily_minutes=self._consolidator.calculate_average_daily_minutes(workdays),
            total_hours=self._consolidator.format_minutes(total),
        )

    def _day_events(self, employee_id: str, date: str):
        start, end = day_bounds(date, self._validator.timezone)
        return order_events(self._events.list_for_employee_between(employee_id=employee_id, start=start, end=end))

    def _shift_for(self, employee_id: str, date: str):
        if not self._schedules:
            return None
        return self._schedules.get_for_employee_and_date(employee_id=employee_id, date=date)
