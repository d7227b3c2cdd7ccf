from __future__ import annotations

from enum import Enum


class EntryType(str, Enum):
    """Tipo de fichaje."""

    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"


class ClockSource(str, Enum):
    WEB = "web"
    MOBILE_DEVICE = "mobile_device"


class DayStatus(str, Enum):
    """Estado actual del empleado dentro del día."""

    NOT_STARTED = "not_started"
    WORKING = "working"
    ON_BREAK = "on_break"
    FINISHED = "finished"


class WorkdayStatus(str, Enum):
    """Ciclo de vida de una jornada consolidada."""

    OPEN = "open"
    CLOSED = "closed"
