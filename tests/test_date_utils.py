# tests/test_date_utils.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from taskboard.tasks.date_utils import (
    describe_date,
    format_relative,
    format_ts,
    is_expired,
    is_today,
    is_tomorrow,
    parse_datetime,
    utc_now,
)

# Midday keeps local-day comparisons stable across machine timezones.
NOW = datetime(2024, 5, 15, 12, 0).astimezone()


def test_parse_datetime_variants() -> None:
    assert parse_datetime(None) is None
    assert parse_datetime("") is None
    assert parse_datetime("not a date") is None

    dt = parse_datetime("2024-05-01T10:00:00Z")
    assert dt == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
    assert dt.tzinfo is UTC

    aware = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    assert parse_datetime(aware) == aware


def test_naive_values_are_local_time() -> None:
    naive = datetime(2024, 5, 1, 8, 0)
    assert parse_datetime(naive) == naive.astimezone()
    assert parse_datetime("2024-05-01T08:00:00") == naive.astimezone()


def test_format_ts() -> None:
    assert format_ts(None) is None
    assert format_ts(datetime(2024, 5, 1, 10, 0, 1, 500000, tzinfo=UTC)) == "2024-05-01T10:00:01.500Z"


def test_day_classification() -> None:
    assert is_today(NOW + timedelta(hours=1), now=NOW)
    assert is_tomorrow(NOW + timedelta(days=1), now=NOW)
    assert is_expired(NOW - timedelta(days=1), now=NOW)
    assert not is_expired(NOW - timedelta(hours=1), now=NOW)
    assert not is_today(None, now=NOW)


def test_describe_date() -> None:
    assert describe_date(None, now=NOW) == ""
    assert describe_date(NOW, now=NOW) == "today"
    assert describe_date(NOW + timedelta(days=1), now=NOW) == "tomorrow"
    assert describe_date(NOW - timedelta(days=3), now=NOW) == "expired"
    assert describe_date(NOW + timedelta(days=10), now=NOW) == "05-25"


def test_format_relative() -> None:
    assert format_relative(NOW - timedelta(seconds=20), now=NOW) == "just now"
    assert format_relative(NOW - timedelta(hours=3), now=NOW) == "3 hours ago"
    assert format_relative(NOW + timedelta(days=2), now=NOW) == "in 2 days"
    assert format_relative(NOW - timedelta(minutes=1), now=NOW) == "1 minute ago"


def test_timestamps_are_millisecond_precision() -> None:
    assert utc_now().microsecond % 1000 == 0

    dt = parse_datetime(datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=UTC))
    assert dt == datetime(2024, 5, 1, 10, 0, 0, 123000, tzinfo=UTC)
    assert parse_datetime(format_ts(dt)) == dt
