from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Union
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` means UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(value))


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Naive timestamps are stored and compared as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_timezone(name: Union[str, tzinfo, None]) -> tzinfo:
    if name is None:
        return timezone.utc
    if isinstance(name, tzinfo):
        return name
    if name.upper() in {"UTC", "Z"}:
        return timezone.utc
    return ZoneInfo(name)


def day_key(timestamp: datetime, tz: tzinfo = timezone.utc) -> str:
    """Calendar day (YYYY-MM-DD) a timestamp belongs to in ``tz``."""
    return ensure_aware(timestamp).astimezone(tz).strftime("%Y-%m-%d")


def parse_hhmm(value: str) -> tuple[int, int]:
    """Split an ``HH:MM`` string into (hours, minutes)."""
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time string: {value!r}")
    return int(parts[0]), int(parts[1])


def hhmm_to_minutes(value: str) -> int:
    hours, minutes = parse_hhmm(value)
    return hours * 60 + minutes


def minute_of_day(timestamp: datetime, tz: tzinfo = timezone.utc) -> int:
    local = ensure_aware(timestamp).astimezone(tz)
    return local.hour * 60 + local.minute


def format_minutes(total_minutes: int) -> str:
    """Format minutes as HH:MM (e.g. 510 -> "08:30")."""
    hours = total_minutes // 60
    minutes = total_minutes % 60
    return f"{hours:02d}:{minutes:02d}"


def to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return ensure_aware(value).isoformat()


def day_bounds(date_str: str, tz: tzinfo = timezone.utc) -> tuple[datetime, datetime]:
    """UTC [start, end) interval covering calendar day ``date_str`` in ``tz``."""
    day = parse_iso_date(date_str)
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def combine_local(date_str: str, hhmm: str, tz: tzinfo = timezone.utc) -> datetime:
    """Aware datetime for ``HH:MM`` on ``date_str`` in ``tz``."""
    day = parse_iso_date(date_str)
    hours, minutes = parse_hhmm(hhmm)
    return datetime(day.year, day.month, day.day, hours, minutes, tzinfo=tz)
