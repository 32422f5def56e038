"""Timestamp parsing and inclusive date windows.

GitHub reports timestamps as ISO-8601 strings with a trailing ``Z``. Window
bounds arrive as calendar dates (``YYYY-MM-DD``) and are interpreted in UTC:
the lower bound is the start of the start day and the upper bound covers the
whole end day.
"""

from __future__ import annotations

import dataclasses
import datetime as dt

_ONE_DAY = dt.timedelta(days=1)


def ensure_utc(value: dt.datetime) -> dt.datetime:
    """Return ``value`` as an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.UTC)
    return value.astimezone(dt.UTC)


def parse_github_datetime(value: str) -> dt.datetime:
    """Parse a GitHub timestamp into an aware UTC datetime.

    Raises
    ------
    ValueError
        If ``value`` is not an ISO-8601 timestamp.

    """
    text = value.strip().replace("Z", "+00:00")
    return ensure_utc(dt.datetime.fromisoformat(text))


def parse_window_date(value: str | dt.date | None) -> dt.date | None:
    """Parse a ``YYYY-MM-DD`` window bound, passing dates and ``None`` through."""
    if value is None or isinstance(value, dt.date):
        return value
    text = value.strip()
    if not text:
        return None
    return dt.date.fromisoformat(text[:10])


def _start_of_day(day: dt.date) -> dt.datetime:
    return dt.datetime(day.year, day.month, day.day, tzinfo=dt.UTC)


@dataclasses.dataclass(frozen=True, slots=True)
class DateWindow:
    """A calendar-date window with an inclusive end day.

    ``start`` maps to midnight UTC of that day; ``end`` maps to midnight UTC of
    the following day, and that instant is still inside the window. Either
    side may be ``None``, which leaves that side unbounded.

    Examples
    --------
    >>> window = DateWindow.from_strings("2024-01-10", "2024-01-20")
    >>> window.contains(parse_github_datetime("2024-01-20T23:59:59Z"))
    True
    >>> window.contains(parse_github_datetime("2024-01-21T00:00:01Z"))
    False

    """

    start: dt.date | None = None
    end: dt.date | None = None

    @classmethod
    def from_strings(
        cls, start: str | dt.date | None, end: str | dt.date | None
    ) -> DateWindow:
        """Build a window from ``YYYY-MM-DD`` strings or dates."""
        return cls(start=parse_window_date(start), end=parse_window_date(end))

    @property
    def lower_bound(self) -> dt.datetime | None:
        """Return the first instant inside the window, if bounded."""
        return None if self.start is None else _start_of_day(self.start)

    @property
    def upper_bound(self) -> dt.datetime | None:
        """Return the last instant inside the window, if bounded."""
        return None if self.end is None else _start_of_day(self.end) + _ONE_DAY

    def contains(self, moment: dt.datetime | None) -> bool:
        """Return True when ``moment`` falls inside the window.

        A missing timestamp is never inside the window.
        """
        if moment is None:
            return False
        value = ensure_utc(moment)
        lower = self.lower_bound
        if lower is not None and value < lower:
            return False
        upper = self.upper_bound
        return upper is None or value <= upper


def in_range(
    timestamp: str | dt.datetime | None,
    start: str | dt.date | None,
    end: str | dt.date | None,
) -> bool:
    """Return True when ``timestamp`` lies in the inclusive ``[start, end]`` window."""
    if timestamp is None:
        return False
    moment = (
        parse_github_datetime(timestamp) if isinstance(timestamp, str) else timestamp
    )
    return DateWindow.from_strings(start, end).contains(moment)
