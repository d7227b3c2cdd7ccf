from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from timeclock.clock.validator import VALID_TRANSITIONS, ClockEventValidator
from timeclock.core.enums import DayStatus, EntryType, WorkdayStatus
from timeclock.workday.consolidator import WorkdayConsolidator


@pytest.fixture
def validator(fixed_now):
    return ClockEventValidator(now=lambda: fixed_now)


def test_timestamp_exactly_now_is_valid(validator, fixed_now):
    result = validator.validate_timestamp(fixed_now)
    assert result.is_valid
    assert result.message == "Timestamp válido"


def test_timestamp_one_millisecond_in_future_is_rejected(validator, fixed_now):
    result = validator.validate_timestamp(fixed_now + timedelta(milliseconds=1))
    assert not result.is_valid
    assert result.message == "No se puede fichar con una fecha futura"


def test_timestamp_eight_days_old_is_rejected(validator, fixed_now):
    result = validator.validate_timestamp(fixed_now - timedelta(days=8))
    assert not result.is_valid
    assert result.message == "No se pueden crear fichajes con más de 7 días de antigüedad"


def test_timestamp_just_under_eight_days_is_accepted(validator, fixed_now):
    assert validator.validate_timestamp(fixed_now - timedelta(days=7, hours=23)).is_valid


def test_naive_timestamp_is_treated_as_utc(validator):
    assert validator.validate_timestamp(datetime(2025, 3, 10, 17, 59)).is_valid


def test_first_event_of_day_must_be_clock_in(validator):
    assert validator.validate_state_transition(EntryType.CLOCK_IN, []).is_valid

    result = validator.validate_state_transition(EntryType.BREAK_START, [])
    assert not result.is_valid
    assert result.message == "El primer fichaje del día debe ser clock_in"


def test_transition_message_names_both_states(validator, make_event):
    events = [make_event("clock_in", "09:00"), make_event("clock_out", "17:00")]

    result = validator.validate_state_transition(EntryType.BREAK_START, events)

    assert not result.is_valid
    assert result.message == "No se puede hacer break_start después de clock_out"


@pytest.mark.parametrize("last", list(EntryType))
@pytest.mark.parametrize("new", list(EntryType))
def test_transition_table_is_enforced(validator, make_event, last, new):
    events = [make_event(last, "10:00")]
    result = validator.validate_state_transition(new, events)
    assert result.is_valid == (new in VALID_TRANSITIONS[last])


def test_legal_walk_is_accepted_step_by_step(validator, make_event):
    path = [
        ("clock_in", "08:00"),
        ("break_start", "10:00"),
        ("break_end", "10:15"),
        ("break_start", "13:00"),
        ("break_end", "13:45"),
        ("clock_out", "17:00"),
    ]
    consolidator = WorkdayConsolidator()
    events = []
    for entry_type, hhmm in path:
        assert validator.validate_state_transition(EntryType(entry_type), events).is_valid
        events.append(make_event(entry_type, hhmm))

        expected = WorkdayStatus.CLOSED if entry_type == "clock_out" else WorkdayStatus.OPEN
        assert consolidator.determine_workday_status(events) == expected


def test_has_duplicate_entry_only_matches_same_day(validator, make_event):
    events = [make_event("clock_in", "09:00", day="2025-03-09")]

    assert validator.has_duplicate_entry(EntryType.CLOCK_IN, "2025-03-09", events)
    assert not validator.has_duplicate_entry(EntryType.CLOCK_IN, "2025-03-10", events)
    assert not validator.has_duplicate_entry(EntryType.CLOCK_OUT, "2025-03-09", events)


def test_second_clock_in_same_day_is_rejected(validator, make_event, fixed_now):
    events = [make_event("clock_in", "09:00"), make_event("clock_out", "12:00")]

    result = validator.validate_clock_in(fixed_now - timedelta(hours=1), events)

    assert not result.is_valid
    assert result.message == "Ya existe un clock-in para este día"


def test_clock_in_ignores_events_from_other_days(validator, make_event, fixed_now):
    events = [make_event("clock_in", "09:00", day="2025-03-09")]
    assert validator.validate_clock_in(fixed_now, events).is_valid


def test_clock_out_without_events_that_day(validator, fixed_now):
    result = validator.validate_clock_out(fixed_now, [])
    assert not result.is_valid
    assert result.message == "No hay clock-in registrado para este día"


def test_clock_out_during_break_is_rejected(validator, make_event, fixed_now):
    events = [make_event("clock_in", "09:00"), make_event("break_start", "12:00")]

    result = validator.validate_clock_out(fixed_now, events)

    assert not result.is_valid
    assert result.message == "No se puede hacer clock_out después de break_start"


def test_break_cycle_validators(validator, make_event, fixed_now):
    events = [make_event("clock_in", "09:00")]
    assert validator.validate_break_start(fixed_now, events).is_valid
    assert not validator.validate_break_end(fixed_now, events).is_valid

    events.append(make_event("break_start", "12:00"))
    assert validator.validate_break_end(fixed_now, events).is_valid


def test_timestamp_check_runs_before_state_checks(validator, fixed_now):
    result = validator.validate_break_end(fixed_now + timedelta(minutes=5), [])
    assert result.message == "No se puede fichar con una fecha futura"


def test_validate_dispatches_on_entry_type(validator, make_event, fixed_now):
    events = [make_event("clock_in", "09:00")]
    assert validator.validate("clock_out", fixed_now, events).is_valid
    assert not validator.validate(EntryType.CLOCK_IN, fixed_now, events).is_valid


def test_events_are_ordered_before_checking_last_state(validator, make_event, fixed_now):
    # stored out of order; the latest event of the day is the break_end at 13:00
    events = [make_event("break_end", "13:00"), make_event("clock_in", "09:00"), make_event("break_start", "12:00")]
    assert validator.validate_clock_out(fixed_now, events).is_valid


def test_day_boundary_follows_configured_timezone(make_event):
    now = datetime(2025, 3, 10, 23, 30, tzinfo=timezone.utc)
    madrid = ClockEventValidator(now=lambda: now, day_boundary_timezone="Europe/Madrid")
    utc = ClockEventValidator(now=lambda: now)

    # 23:30 UTC on March 10 is already March 11 in Madrid (UTC+1)
    assert utc.day_key(now) == "2025-03-10"
    assert madrid.day_key(now) == "2025-03-11"

    events = [make_event("clock_in", "08:00")]
    assert not utc.validate_clock_in(now, events).is_valid
    assert madrid.validate_clock_in(now, events).is_valid


@pytest.mark.parametrize(
    "types,expected",
    [
        ([], DayStatus.NOT_STARTED),
        (["clock_in"], DayStatus.WORKING),
        (["clock_in", "break_start"], DayStatus.ON_BREAK),
        (["clock_in", "break_start", "break_end"], DayStatus.WORKING),
        (["clock_in", "clock_out"], DayStatus.FINISHED),
    ],
)
def test_current_day_status(validator, make_event, types, expected):
    events = [make_event(t, f"{9 + i:02d}:00") for i, t in enumerate(types)]
    assert validator.get_current_day_status(events) == expected
