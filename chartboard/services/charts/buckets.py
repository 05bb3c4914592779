"""
Bucket Builder — Partition a per-day raw series into ordered display buckets.

Walks the primary range one day at a time with a second cursor over the
comparison range, so the N-th comparison day lines up with the N-th primary
day. Only the first and last buckets carry readable labels; interior buckets
are labelled with their 1-based position.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date, timedelta

from chartboard.services.charts.date_keys import to_key
from chartboard.services.charts.errors import InvalidArgument
from chartboard.services.charts.granularity import Granularity, classify
from chartboard.services.charts.ranges import DateRange, require_range
from chartboard.services.charts.series_store import Number

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)
_WEEK_DAYS = 7


@dataclass(frozen=True, slots=True)
class Bucket:
    """One aggregated span of the primary range.

    Attributes:
        label: "Mon D" for the first/last bucket, 1-based index otherwise.
        value: Rounded sum of primary-range values, or None when no day had data.
        comparison_value: Rounded sum of aligned comparison values, or None.
        exact_value: Unrounded sum behind `value`, used for period totals.
        exact_comparison_value: Unrounded sum behind `comparison_value`.
    """

    label: str
    value: int | None = None
    comparison_value: int | None = None
    exact_value: Number | None = field(default=None, compare=False, repr=False)
    exact_comparison_value: Number | None = field(default=None, compare=False, repr=False)


def readable_label(day: date) -> str:
    """Axis label for a day, e.g. `Jan 5`."""
    return f"{day:%b} {day.day}"


def _round_half_up(value: Number | None) -> int | None:
    if value is None:
        return None
    return int(math.floor(value + 0.5))


def _accumulate(total: Number | None, value: Number | None) -> Number | None:
    # None means "no contribution yet", distinct from a running sum of 0
    if value is None:
        return total
    return value if total is None else total + value


def _starts_new_bucket(granularity: Granularity, day: date, offset: int, bucket_start: date) -> bool:
    if granularity is Granularity.DAYS:
        return True
    if granularity is Granularity.WEEKS:
        return offset % _WEEK_DAYS == 0
    return (day.year, day.month) != (bucket_start.year, bucket_start.month)


def build_buckets(
    primary: DateRange | None,
    comparison: DateRange | None,
    series: Mapping[str, Number] | None,
    granularity: Granularity | None = None,
    *,
    include_single_day: bool = True,
) -> list[Bucket]:
    """Aggregate `series` into buckets covering `primary`.

    Args:
        primary: Range being displayed.
        comparison: Baseline range, aligned day-by-day with `primary`.
        series: Date-key → value map (a RawSeriesStore or plain dict).
        granularity: Bucket width; classified from `primary` when omitted.
        include_single_day: When False, a single-day primary range yields no
            buckets at all instead of one DAYS bucket.

    Returns:
        Buckets in ascending date order.
    """
    primary = require_range(primary, "primary range")
    comparison = require_range(comparison, "comparison range")
    if series is None:
        raise InvalidArgument("Raw series is required")
    if granularity is None:
        granularity = classify(primary)

    if primary.is_single_day and not include_single_day:
        return []

    buckets: list[Bucket] = []
    value: Number | None = None
    comparison_value: Number | None = None
    bucket_start = primary.start
    cursor = comparison.start

    for offset, day in enumerate(primary.days()):
        if offset > 0 and _starts_new_bucket(granularity, day, offset, bucket_start):
            buckets.append(_close(len(buckets), primary, value, comparison_value))
            value = comparison_value = None
            bucket_start = day

        value = _accumulate(value, series.get(to_key(day)))

        # Skip comparison days inside the primary window to avoid double counting
        if cursor < primary.start and cursor <= comparison.end:
            comparison_value = _accumulate(comparison_value, series.get(to_key(cursor)))
        cursor += _ONE_DAY

    buckets.append(_close(len(buckets), primary, value, comparison_value))
    buckets[-1] = replace(buckets[-1], label=readable_label(primary.end))

    if comparison.day_count < primary.day_count:
        buckets[-1] = replace(
            buckets[-1], comparison_value=None, exact_comparison_value=None
        )

    logger.debug(
        "Built %d %s bucket(s) for %s..%s",
        len(buckets),
        granularity.value,
        primary.start,
        primary.end,
    )
    return buckets


def _close(
    index: int,
    primary: DateRange,
    value: Number | None,
    comparison_value: Number | None,
) -> Bucket:
    label = readable_label(primary.start) if index == 0 else str(index + 1)
    return Bucket(
        label=label,
        value=_round_half_up(value),
        comparison_value=_round_half_up(comparison_value),
        exact_value=value,
        exact_comparison_value=comparison_value,
    )
