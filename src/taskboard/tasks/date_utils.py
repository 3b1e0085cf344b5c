# src/taskboard/tasks/date_utils.py

"""
Date helpers.

Stored timestamps carry millisecond precision, so every datetime that
enters the model is truncated to whole milliseconds. A value read back
from storage then compares equal to the one that was written.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta


def to_millis(dt: datetime) -> datetime:
    """Drop sub-millisecond precision."""
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def utc_now() -> datetime:
    return to_millis(datetime.now(UTC))


def parse_datetime(raw: object) -> datetime | None:
    """
    Parse an ISO-8601 string (or pass through a datetime) into an aware UTC datetime.

    Naive values are interpreted as local wall-clock time.
    Returns None for empty or unparseable input.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        try:
            dt = datetime.fromisoformat(str(raw).strip())
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return to_millis(dt.astimezone(UTC))


def format_ts(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _local_day(dt: datetime) -> date:
    return dt.astimezone().date()


def format_date(dt: datetime | None, fmt: str = "%Y-%m-%d %H:%M") -> str:
    if dt is None:
        return ""
    return dt.astimezone().strftime(fmt)


def is_expired(dt: datetime | None, *, now: datetime | None = None) -> bool:
    """True if the date falls on a day before today (local time)."""
    if dt is None:
        return False
    return _local_day(dt) < _local_day(now or utc_now())


def is_today(dt: datetime | None, *, now: datetime | None = None) -> bool:
    if dt is None:
        return False
    return _local_day(dt) == _local_day(now or utc_now())


def is_tomorrow(dt: datetime | None, *, now: datetime | None = None) -> bool:
    if dt is None:
        return False
    return _local_day(dt) == _local_day(now or utc_now()) + timedelta(days=1)


def describe_date(dt: datetime | None, *, now: datetime | None = None) -> str:
    if dt is None:
        return ""
    if is_today(dt, now=now):
        return "today"
    if is_tomorrow(dt, now=now):
        return "tomorrow"
    if is_expired(dt, now=now):
        return "expired"
    return format_date(dt, "%m-%d")


_UNITS = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
)


def format_relative(dt: datetime | None, *, now: datetime | None = None) -> str:
    """Human relative time: "3 hours ago", "in 2 days", "just now"."""
    if dt is None:
        return ""
    delta = (dt - (now or utc_now())).total_seconds()
    seconds = abs(delta)
    for unit, size in _UNITS:
        if seconds >= size:
            n = int(seconds // size)
            label = f"{n} {unit}{'s' if n != 1 else ''}"
            return f"in {label}" if delta > 0 else f"{label} ago"
    return "just now"
