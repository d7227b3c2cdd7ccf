from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ScheduledShift:
    """Planned shift for one employee on one day (times as ``HH:MM``)."""

    employee_id: str
    date: str
    start_time: Optional[str]
    end_time: Optional[str]
    shift_id: Optional[str] = None
    schedule_type: Optional[str] = None
