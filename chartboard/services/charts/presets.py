"""
Range Presets — Dashboard date-range and comparison presets.

All presets are computed relative to an explicitly passed `today`. Nothing
is anchored at import time, so a long-running process rolls over midnight
correctly.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

from chartboard.services.charts.errors import InvalidArgument
from chartboard.services.charts.ranges import DateRange, require_range

_ONE_DAY = timedelta(days=1)

# Legacy dashboard rows carry this misspelling of CURRENT_MONTH
_DASHBOARD_CODE_ALIASES = {"CURENT_MONTH": "CURRENT_MONTH"}


class RangePreset(str, Enum):
    """Primary range presets offered by the dashboard."""

    LAST_30_DAYS = "last_30_days"
    LAST_90_DAYS = "last_90_days"
    CURRENT_MONTH = "current_month"

    @property
    def label(self) -> str:
        return _RANGE_LABELS[self]

    @classmethod
    def from_dashboard_code(cls, code: str | None) -> RangePreset | None:
        """Map a dashboard row's `initialDateRange` code (e.g. LAST_90_DAYS)."""
        if not code:
            return None
        normalized = _DASHBOARD_CODE_ALIASES.get(code.upper(), code.upper())
        try:
            return cls[normalized]
        except KeyError:
            return None


class ComparisonPreset(str, Enum):
    """Comparison period presets."""

    PREVIOUS_PERIOD = "previous_period"
    PREVIOUS_30_DAYS = "previous_30_days"
    PREVIOUS_90_DAYS = "previous_90_days"
    PREVIOUS_MONTH = "previous_month"

    @property
    def label(self) -> str:
        return _COMPARISON_LABELS[self]


_RANGE_LABELS = {
    RangePreset.LAST_30_DAYS: "Last 30 days",
    RangePreset.LAST_90_DAYS: "Last 90 days",
    RangePreset.CURRENT_MONTH: "Current month",
}

_COMPARISON_LABELS = {
    ComparisonPreset.PREVIOUS_PERIOD: "Previous period",
    ComparisonPreset.PREVIOUS_30_DAYS: "Previous 30 days",
    ComparisonPreset.PREVIOUS_90_DAYS: "Previous 90 days",
    ComparisonPreset.PREVIOUS_MONTH: "Previous month",
}


def _require_today(today: date | None) -> date:
    if today is None:
        raise InvalidArgument("today is required")
    return today


def preset_range(preset: RangePreset, *, today: date) -> DateRange:
    """Resolve a primary range preset against `today` (inclusive)."""
    today = _require_today(today)
    if preset is RangePreset.LAST_30_DAYS:
        return DateRange(start=today - timedelta(days=29), end=today)
    if preset is RangePreset.LAST_90_DAYS:
        return DateRange(start=today - timedelta(days=89), end=today)
    if preset is RangePreset.CURRENT_MONTH:
        return DateRange(start=today.replace(day=1), end=today)
    raise InvalidArgument(f"Unknown range preset: {preset!r}")


def previous_period(primary: DateRange) -> DateRange:
    """Window of the same calendar duration ending the day before `primary`."""
    primary = require_range(primary, "primary range")
    span = relativedelta(primary.end, primary.start)
    return DateRange(
        start=primary.start - span - _ONE_DAY,
        end=primary.start - _ONE_DAY,
    )


def comparison_range(
    preset: ComparisonPreset,
    primary: DateRange,
    *,
    today: date,
) -> DateRange:
    """Resolve a comparison preset for a primary range."""
    primary = require_range(primary, "primary range")
    today = _require_today(today)
    day_before = primary.start - _ONE_DAY

    if preset is ComparisonPreset.PREVIOUS_PERIOD:
        return previous_period(primary)
    if preset is ComparisonPreset.PREVIOUS_30_DAYS:
        return DateRange(start=primary.start - timedelta(days=30), end=day_before)
    if preset is ComparisonPreset.PREVIOUS_90_DAYS:
        return DateRange(start=primary.start - timedelta(days=90), end=day_before)
    if preset is ComparisonPreset.PREVIOUS_MONTH:
        first_of_this_month = today.replace(day=1)
        return DateRange(
            start=first_of_this_month - relativedelta(months=1),
            end=first_of_this_month - _ONE_DAY,
        )
    raise InvalidArgument(f"Unknown comparison preset: {preset!r}")
