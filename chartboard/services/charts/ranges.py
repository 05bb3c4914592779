"""
Date Ranges — Inclusive calendar windows used for primary and comparison periods.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, timedelta

from chartboard.services.charts.date_keys import DateLike, to_date, to_key
from chartboard.services.charts.errors import InvalidArgument

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, slots=True)
class DateRange:
    """An inclusive [start, end] window of calendar days.

    Attributes:
        start: First day in the window.
        end: Last day in the window (inclusive). Never before `start`.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start is None or self.end is None:
            raise InvalidArgument("Date range requires both start and end")
        if self.start > self.end:
            raise InvalidArgument(
                f"Date range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @classmethod
    def of(cls, start: DateLike | None, end: DateLike | None) -> DateRange:
        """Build a range from loose inputs (dates, datetimes, ISO strings)."""
        if start is None or end is None:
            raise InvalidArgument("Date range requires both start and end")
        return cls(start=to_date(start), end=to_date(end))

    @property
    def day_count(self) -> int:
        """Days between start and end; 0 for a single-day range."""
        return (self.end - self.start).days

    @property
    def is_single_day(self) -> bool:
        return to_key(self.start) == to_key(self.end)

    def days(self) -> Iterator[date]:
        """Yield every day in the window, ascending."""
        current = self.start
        while current <= self.end:
            yield current
            current += _ONE_DAY

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps_or_touches(self, other: DateRange) -> bool:
        """True when the two windows overlap or are adjacent days."""
        return self.start <= other.end + _ONE_DAY and other.start <= self.end + _ONE_DAY

    def hull(self, other: DateRange) -> DateRange:
        """Smallest range covering both windows."""
        return DateRange(start=min(self.start, other.start), end=max(self.end, other.end))


def require_range(value: DateRange | None, name: str = "range") -> DateRange:
    """Raise InvalidArgument when a range argument is missing."""
    if value is None:
        raise InvalidArgument(f"{name} is required")
    return value
