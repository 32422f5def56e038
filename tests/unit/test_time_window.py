"""Unit tests for timestamp parsing and inclusive date windows."""

from __future__ import annotations

import datetime as dt

import pytest

from forager.common.time import (
    DateWindow,
    ensure_utc,
    in_range,
    parse_github_datetime,
    parse_window_date,
)


def test_parse_github_datetime_returns_aware_utc() -> None:
    """Trailing Z and explicit offsets both normalise to UTC."""
    assert parse_github_datetime("2024-01-20T23:59:59Z") == dt.datetime(
        2024, 1, 20, 23, 59, 59, tzinfo=dt.UTC
    )
    assert parse_github_datetime("2024-01-21T01:00:00+02:00") == dt.datetime(
        2024, 1, 20, 23, 0, tzinfo=dt.UTC
    )


def test_ensure_utc_treats_naive_values_as_utc() -> None:
    """Naive datetimes gain a UTC tzinfo without shifting."""
    naive = dt.datetime(2024, 1, 1, 8, 30)  # noqa: DTZ001
    assert ensure_utc(naive) == dt.datetime(2024, 1, 1, 8, 30, tzinfo=dt.UTC)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-01-10", dt.date(2024, 1, 10)),
        ("2024-01-10T05:00:00Z", dt.date(2024, 1, 10)),
        ("", None),
        (None, None),
        (dt.date(2024, 2, 1), dt.date(2024, 2, 1)),
    ],
)
def test_parse_window_date(raw: str | dt.date | None, expected: dt.date | None) -> None:
    """Window bounds accept strings, dates, and blanks."""
    assert parse_window_date(raw) == expected


@pytest.mark.parametrize(
    ("timestamp", "expected"),
    [
        ("2024-01-20T23:59:59Z", True),
        ("2024-01-21T00:00:01Z", False),
        ("2024-01-10T00:00:00Z", True),
        ("2024-01-09T23:59:59Z", False),
        ("2024-01-15T12:00:00Z", True),
    ],
)
def test_in_range_includes_whole_end_day(timestamp: str, expected: bool) -> None:  # noqa: FBT001
    """The end day is inclusive and the start is midnight of the start day."""
    assert in_range(timestamp, "2024-01-10", "2024-01-20") is expected


def test_upper_bound_is_end_plus_one_day() -> None:
    """The upper bound is the midnight after the end date and is itself inside."""
    window = DateWindow.from_strings("2024-01-10", "2024-01-20")

    assert window.upper_bound == dt.datetime(2024, 1, 21, tzinfo=dt.UTC)
    assert window.contains(dt.datetime(2024, 1, 21, tzinfo=dt.UTC))


def test_open_window_sides_do_not_filter() -> None:
    """Absent bounds impose no limit on that side."""
    far_past = dt.datetime(1990, 1, 1, tzinfo=dt.UTC)
    far_future = dt.datetime(2090, 1, 1, tzinfo=dt.UTC)

    assert DateWindow().contains(far_past)
    assert DateWindow(end=dt.date(2024, 1, 20)).contains(far_past)
    assert not DateWindow(end=dt.date(2024, 1, 20)).contains(far_future)
    assert DateWindow(start=dt.date(2024, 1, 10)).contains(far_future)


def test_missing_timestamp_is_never_inside() -> None:
    """None is outside every window, including an unbounded one."""
    assert not DateWindow().contains(None)
    assert not in_range(None, "2024-01-10", "2024-01-20")
