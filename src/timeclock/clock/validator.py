"""Validation of proposed clock events.

A new event is accepted when its timestamp is sane (not in the future, not
older than the backdating window) and when its type is a legal successor of
the last event already recorded for the same calendar day:

    (none)       -> clock_in
    clock_in     -> break_start | clock_out
    break_start  -> break_end
    break_end    -> break_start | clock_out
    clock_out    -> (terminal)

Every check returns a ``ValidationResult``; nothing here raises for a
business-rule rejection. The messages are shown to the end user as-is.
"""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Callable, Iterable, Optional, Sequence, Union

from ..common.datetime_utils import day_key, ensure_aware, now_utc, resolve_timezone
from ..core.constants import DEFAULT_DAY_BOUNDARY_TIMEZONE, MAX_BACKDATE_DAYS
from ..core.enums import DayStatus, EntryType
from .model import ClockEvent, ValidationResult

DUPLICATE_CLOCK_IN_MESSAGE = "Ya existe un clock-in para este día"

VALID_TRANSITIONS: dict[EntryType, frozenset[EntryType]] = {
    EntryType.CLOCK_IN: frozenset({EntryType.BREAK_START, EntryType.CLOCK_OUT}),
    EntryType.BREAK_START: frozenset({EntryType.BREAK_END}),
    EntryType.BREAK_END: frozenset({EntryType.BREAK_START, EntryType.CLOCK_OUT}),
    EntryType.CLOCK_OUT: frozenset(),
}

_DAY_STATUS_BY_LAST_TYPE = {
    EntryType.CLOCK_IN: DayStatus.WORKING,
    EntryType.BREAK_START: DayStatus.ON_BREAK,
    EntryType.BREAK_END: DayStatus.WORKING,
    EntryType.CLOCK_OUT: DayStatus.FINISHED,
}


def order_events(events: Iterable[ClockEvent]) -> list[ClockEvent]:
    """Ascending by timestamp; equal timestamps keep their insertion order."""
    return sorted(events, key=lambda e: e.timestamp)


class ClockEventValidator:
    def __init__(
        self,
        *,
        now: Optional[Callable[[], datetime]] = None,
        day_boundary_timezone: Union[str, tzinfo] = DEFAULT_DAY_BOUNDARY_TIMEZONE,
        max_backdate_days: int = MAX_BACKDATE_DAYS,
    ):
        self._now = now or now_utc
        self._tz = resolve_timezone(day_boundary_timezone)
        self._max_backdate_days = int(max_backdate_days)

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    def day_key(self, timestamp: datetime) -> str:
        return day_key(timestamp, self._tz)

    def events_for_day(self, date: str, events: Iterable[ClockEvent]) -> list[ClockEvent]:
        return order_events(e for e in events if self.day_key(e.timestamp) == date)

    def validate_timestamp(self, timestamp: datetime) -> ValidationResult:
        now = ensure_aware(self._now())
        timestamp = ensure_aware(timestamp)

        if timestamp > now:
            return ValidationResult(False, "No se puede fichar con una fecha futura")

        days_difference = (now - timestamp) // timedelta(days=1)
        if days_difference > self._max_backdate_days:
            return ValidationResult(
                False,
                f"No se pueden crear fichajes con más de {self._max_backdate_days} días de antigüedad",
            )

        return ValidationResult(True, "Timestamp válido")

    def has_duplicate_entry(self, entry_type: EntryType, date: str, existing: Iterable[ClockEvent]) -> bool:
        entry_type = EntryType(entry_type)
        return any(e.entry_type == entry_type and self.day_key(e.timestamp) == date for e in existing)

    def validate_state_transition(self, new_entry_type: EntryType, same_day_events: Sequence[ClockEvent]) -> ValidationResult:
        new_entry_type = EntryType(new_entry_type)

        if not same_day_events:
            if new_entry_type != EntryType.CLOCK_IN:
                return ValidationResult(False, "El primer fichaje del día debe ser clock_in")
            return ValidationResult(True, "Primera entrada válida")

        last_type = same_day_events[-1].entry_type
        if new_entry_type not in VALID_TRANSITIONS.get(last_type, frozenset()):
            return ValidationResult(
                False,
                f"No se puede hacer {new_entry_type.value} después de {last_type.value}",
            )

        return ValidationResult(True, "Transición válida")

    def validate_clock_in(self, timestamp: datetime, existing: Sequence[ClockEvent]) -> ValidationResult:
        result = self.validate_timestamp(timestamp)
        if not result.is_valid:
            return result

        date = self.day_key(timestamp)
        if self.has_duplicate_entry(EntryType.CLOCK_IN, date, existing):
            return ValidationResult(False, DUPLICATE_CLOCK_IN_MESSAGE)

        return self.validate_state_transition(EntryType.CLOCK_IN, self.events_for_day(date, existing))

    def validate_clock_out(self, timestamp: datetime, existing: Sequence[ClockEvent]) -> ValidationResult:
        result = self.validate_timestamp(timestamp)
        if not result.is_valid:
            return result

        day_events = self.events_for_day(self.day_key(timestamp), existing)
        if not day_events:
            return ValidationResult(False, "No hay clock-in registrado para este día")

        return self.validate_state_transition(EntryType.CLOCK_OUT, day_events)

    def validate_break_start(self, timestamp: datetime, existing: Sequence[ClockEvent]) -> ValidationResult:
        return self._validate_simple(EntryType.BREAK_START, timestamp, existing)

    def validate_break_end(self, timestamp: datetime, existing: Sequence[ClockEvent]) -> ValidationResult:
        return self._validate_simple(EntryType.BREAK_END, timestamp, existing)

    def validate(self, entry_type: EntryType, timestamp: datetime, existing: Sequence[ClockEvent]) -> ValidationResult:
        """Run the check that matches ``entry_type``."""
        handlers = {
            EntryType.CLOCK_IN: self.validate_clock_in,
            EntryType.CLOCK_OUT: self.validate_clock_out,
            EntryType.BREAK_START: self.validate_break_start,
            EntryType.BREAK_END: self.validate_break_end,
        }
        return handlers[EntryType(entry_type)](timestamp, existing)

    def get_current_day_status(self, ordered_events: Sequence[ClockEvent]) -> DayStatus:
        if not ordered_events:
            return DayStatus.NOT_STARTED
        return _DAY_STATUS_BY_LAST_TYPE.get(ordered_events[-1].entry_type, DayStatus.NOT_STARTED)

    def _validate_simple(self, entry_type: EntryType, timestamp: datetime, existing: Sequence[ClockEvent]) -> ValidationResult:
        result = self.validate_timestamp(timestamp)
        if not result.is_valid:
            return result
        return self.validate_state_transition(entry_type, self.events_for_day(self.day_key(timestamp), existing))
