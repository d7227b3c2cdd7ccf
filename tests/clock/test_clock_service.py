from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta

import pytest

from timeclock.clock.service import ClockService, DayLocks
from timeclock.core.enums import DayStatus, EntryType, WorkdayStatus
from timeclock.core.exceptions import ValidationError


def _at(hhmm: str, day: str = "2025-03-10") -> datetime:
    return datetime.fromisoformat(f"{day}T{hhmm}:00+00:00")


@pytest.fixture
def svc(events_repo, workdays_repo, schedules_repo, fixed_now):
    return ClockService(events_repo, workdays_repo, schedules_repo, now=lambda: fixed_now)


def test_full_day_is_consolidated(svc, workdays_repo):
    svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("08:30"), source="web")
    svc.record("emp-1", EntryType.BREAK_START, timestamp=_at("12:00"))
    svc.record("emp-1", EntryType.BREAK_END, timestamp=_at("12:45"))
    event, summary = svc.record("emp-1", EntryType.CLOCK_OUT, timestamp=_at("17:45"))

    assert event.event_id == "4"
    assert summary.status == WorkdayStatus.CLOSED
    assert summary.worked_minutes == 555
    assert summary.break_minutes == 45
    assert summary.overtime_minutes == 75
    assert summary.shift_id == "sh-1"
    assert workdays_repo.get_for_employee_and_date(employee_id="emp-1", date="2025-03-10") == summary


def test_summary_is_open_after_clock_in(svc):
    _, summary = svc.record("emp-1", "clock_in", timestamp=_at("09:00"))

    assert summary.status == WorkdayStatus.OPEN
    assert summary.start_time == _at("09:00")
    assert summary.end_time is None


def test_rejection_raises_with_user_message(svc, events_repo):
    svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:00"))

    with pytest.raises(ValidationError, match="Ya existe un clock-in para este día"):
        svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:01"))

    assert len(events_repo.events) == 1


def test_future_timestamp_is_not_stored(svc, events_repo, fixed_now):
    with pytest.raises(ValidationError, match="fecha futura"):
        svc.record("emp-1", EntryType.CLOCK_IN, timestamp=fixed_now + timedelta(minutes=1))

    assert events_repo.events == []


def test_no_events_after_clock_out(svc):
    svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:00"))
    svc.record("emp-1", EntryType.CLOCK_OUT, timestamp=_at("17:00"))

    with pytest.raises(ValidationError, match="No se puede hacer break_start después de clock_out"):
        svc.record("emp-1", EntryType.BREAK_START, timestamp=_at("17:30"))


def test_timestamp_defaults_to_now(svc, fixed_now):
    event, _ = svc.record("emp-1", EntryType.CLOCK_IN)
    assert event.timestamp == fixed_now


def test_employees_do_not_interfere(svc):
    svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:00"))
    _, summary = svc.record("emp-2", EntryType.CLOCK_IN, timestamp=_at("09:05"))

    assert summary.employee_id == "emp-2"
    assert summary.shift_id is None


def test_current_status(svc, fixed_now):
    assert svc.current_status("emp-1") == DayStatus.NOT_STARTED

    svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:00"))
    svc.record("emp-1", EntryType.BREAK_START, timestamp=_at("12:00"))

    assert svc.current_status("emp-1") == DayStatus.ON_BREAK
    assert svc.current_status("emp-1", now=fixed_now + timedelta(days=1)) == DayStatus.NOT_STARTED


def test_concurrent_duplicate_clock_in_stores_one_event(svc, events_repo):
    errors = []
    barrier = threading.Barrier(5)

    def tap():
        barrier.wait()
        try:
            svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:00"))
        except ValidationError as e:
            errors.append(str(e))

    threads = [threading.Thread(target=tap) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(events_repo.events) == 1
    assert len(errors) == 4


def test_backdated_event_lands_on_its_own_day(svc, workdays_repo):
    _, summary = svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:00", day="2025-03-07"))

    assert summary.date == "2025-03-07"
    assert workdays_repo.get_for_employee_and_date(employee_id="emp-1", date="2025-03-10") is None


def test_separate_workers_store_one_clock_in(events_repo, workdays_repo, schedules_repo, fixed_now):
    # each worker process builds its own container, so nothing in-process is shared
    workers = [
        ClockService(events_repo, workdays_repo, schedules_repo, now=lambda: fixed_now, locks=DayLocks())
        for _ in range(2)
    ]
    errors = []
    barrier = threading.Barrier(len(workers))

    def tap(svc):
        barrier.wait()
        try:
            svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:00"))
        except ValidationError as e:
            errors.append(str(e))

    threads = [threading.Thread(target=tap, args=(svc,)) for svc in workers]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert [e.entry_type for e in events_repo.events] == [EntryType.CLOCK_IN]
    assert errors == ["Ya existe un clock-in para este día"]


def test_storage_conflict_becomes_duplicate_message(svc, events_repo, monkeypatch):
    svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:00"))
    # the read misses the row another worker just committed
    monkeypatch.setattr(events_repo, "list_for_employee_between", lambda **kwargs: [])

    with pytest.raises(ValidationError, match="Ya existe un clock-in para este día"):
        svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:01"))

    assert len(events_repo.events) == 1


def test_day_locks_are_released_after_use(events_repo, workdays_repo, fixed_now):
    locks = DayLocks()
    svc = ClockService(events_repo, workdays_repo, now=lambda: fixed_now, locks=locks)

    for i in range(200):
        svc.record(f"emp-{i}", EntryType.CLOCK_IN, timestamp=_at("09:00"))
    with pytest.raises(ValidationError):
        svc.record("emp-0", EntryType.CLOCK_IN, timestamp=_at("09:05"))

    assert len(locks) == 0


def test_day_lock_is_kept_while_held():
    locks = DayLocks()

    with locks.hold("emp-1", "2025-03-10"):
        with locks.hold("emp-1", "2025-03-11"):
            assert len(locks) == 2
        assert len(locks) == 1

    assert len(locks) == 0


def test_failed_summary_refresh_is_logged(svc, events_repo, workdays_repo, monkeypatch, caplog):
    monkeypatch.setattr(logging.getLogger("timeclock"), "propagate", True)

    def broken_upsert(summary):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(workdays_repo, "upsert", broken_upsert)

    with caplog.at_level(logging.WARNING, logger="timeclock.clock.service"):
        with pytest.raises(RuntimeError):
            svc.record("emp-1", EntryType.CLOCK_IN, timestamp=_at("09:00"))

    assert len(events_repo.events) == 1
    warning = next(r for r in caplog.records if r.name == "timeclock.clock.service")
    assert warning.levelno == logging.WARNING
    assert "emp-1" in warning.getMessage()
    assert "2025-03-10" in warning.getMessage()
