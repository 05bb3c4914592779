"""
Staleness Checker — Decide whether the held series covers the next render.

Expand-only model: the held series grows forward in `end` and backward in
`start`. A requested window that moved inside the historical min/max without
extending past either edge is not detected here; RawSeriesStore.missing_ranges
tracks the exact covered intervals for that.
"""

from __future__ import annotations

from chartboard.services.charts.ranges import DateRange, require_range


def is_stale(
    requested: DateRange | None,
    comparison: DateRange | None,
    fetched: DateRange | None,
) -> bool:
    """Return True when a refetch is required before rebuilding buckets."""
    requested = require_range(requested, "requested range")
    comparison = require_range(comparison, "comparison range")

    if fetched is None:
        return True
    if requested.end > fetched.end:
        return True
    if comparison.start < fetched.start:
        return True
    return False


def fetch_window(requested: DateRange, comparison: DateRange) -> DateRange:
    """Window to fetch on a stale detection: the hull of both ranges."""
    return require_range(requested, "requested range").hull(
        require_range(comparison, "comparison range")
    )
