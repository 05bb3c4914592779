"""
Summary Aggregator — Period totals and the percent-difference label.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from chartboard.services.charts.buckets import Bucket
from chartboard.services.charts.series_store import Number

NOT_AVAILABLE = "N/A"

_ONE_PLACE = Decimal("0.1")


@dataclass(frozen=True, slots=True)
class Summary:
    """Totals for the primary and comparison periods."""

    total: Number
    comparison_total: Number
    percent_delta: str

    @property
    def is_increase(self) -> bool:
        return self.total > self.comparison_total

    @property
    def total_display(self) -> str:
        return format_total(self.total)

    @property
    def comparison_total_display(self) -> str:
        return format_total(self.comparison_total)


def percent_delta(value: Number, comparison: Number) -> str:
    """Percent difference relative to the mean of both totals, e.g. `+40.0%`.

    A zero mean has no defined ratio: equal totals report `0.0%`, anything
    else reports `N/A`.
    """
    mean = (value + comparison) / 2
    if mean == 0:
        return "0.0%" if value == comparison else NOT_AVAILABLE

    percent = Decimal(100 * abs(value - comparison) / abs(mean))
    rounded = percent.quantize(_ONE_PLACE, rounding=ROUND_HALF_UP)
    sign = "+" if value > comparison else "-"
    return f"{sign}{rounded}%"


def format_total(value: Number) -> str:
    """Thousands-separated total; two decimals only when fractional."""
    if value % 1 == 0:
        return f"{int(value):,}"
    return f"{value:,.2f}"


def summarize(value_total: Number, comparison_total: Number) -> Summary:
    return Summary(
        total=value_total,
        comparison_total=comparison_total,
        percent_delta=percent_delta(value_total, comparison_total),
    )


def summarize_buckets(buckets: Iterable[Bucket]) -> Summary:
    """Sum non-null bucket values for both periods and summarize them.

    Totals use each bucket's unrounded sums when present, so fractional
    daily values survive into the header.
    """
    total: Number = 0
    comparison_total: Number = 0
    for bucket in buckets:
        value = _exact_or_rounded(bucket.exact_value, bucket.value)
        if value is not None:
            total += value
        comparison = _exact_or_rounded(
            bucket.exact_comparison_value, bucket.comparison_value
        )
        if comparison is not None:
            comparison_total += comparison
    return summarize(total, comparison_total)


def _exact_or_rounded(exact: Number | None, rounded: int | None) -> Number | None:
    return exact if exact is not None else rounded
