from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import WorkdayStatus


@dataclass(frozen=True)
class WorkdaySummary:
    """Consolidated view of one employee's day, derived from clock events."""

    employee_id: str
    date: str
    worked_minutes: int
    break_minutes: int
    overtime_minutes: int
    status: WorkdayStatus
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    shift_id: Optional[str] = None
    workday_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.workday_id,
            "employeeId": self.employee_id,
            "date": self.date,
            "shiftId": self.shift_id,
            "workedMinutes": self.worked_minutes,
            "breakMinutes": self.break_minutes,
            "overtimeMinutes": self.overtime_minutes,
            "status": self.status.value,
            "startTime": to_iso(self.start_time),
            "endTime": to_iso(self.end_time),
        }


@dataclass(frozen=True)
class WorkedTime:
    total_minutes: int
    hours: int
    minutes: int

    @classmethod
    def from_minutes(cls, total_minutes: int) -> "WorkedTime":
        return cls(total_minutes=total_minutes, hours=total_minutes // 60, minutes=total_minutes % 60)


@dataclass(frozen=True)
class ScheduleComparison:
    is_on_time: bool
    minutes_difference: int
    started_early: bool
    finished_late: bool

    def to_dict(self) -> dict:
        return {
            "isOnTime": self.is_on_time,
            "minutesDifference": self.minutes_difference,
            "startedEarly": self.started_early,
            "finishedLate": self.finished_late,
        }
