"""
Raw Series Store — In-memory date-key → value map for one chart.

The store also keeps an interval index of the sub-ranges that have actually
been fetched, so repeated navigation between already-seen windows does not
trigger a refetch. Keys are canonical `YYYY-MM-DD` strings; the map is sparse
(days without data are absent, not zero).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import date, timedelta
from typing import Any, Union

from chartboard.services.charts.date_keys import DateLike, to_key
from chartboard.services.charts.errors import InvalidArgument
from chartboard.services.charts.ranges import DateRange, require_range

logger = logging.getLogger(__name__)

Number = Union[int, float]
Rows = Union[Mapping[Any, Number | None], Iterable[tuple[DateLike, Number | None]]]

_ONE_DAY = timedelta(days=1)


def normalize_rows(rows: Rows) -> dict[str, Number]:
    """Collapse raw (timestamp, value) rows into one summed value per day.

    Rows with a None value are skipped — a missing value is "no data", not 0.
    """
    pairs = rows.items() if isinstance(rows, Mapping) else rows
    values: dict[str, Number] = {}
    for stamp, value in pairs:
        if value is None:
            continue
        key = to_key(stamp)
        values[key] = values[key] + value if key in values else value
    return values


def coalesce_ranges(ranges: Iterable[DateRange]) -> list[DateRange]:
    """Sort and merge overlapping/adjacent ranges."""
    merged: list[DateRange] = []
    for current in sorted(ranges, key=lambda r: r.start):
        if merged and merged[-1].overlaps_or_touches(current):
            merged[-1] = merged[-1].hull(current)
        else:
            merged.append(current)
    return merged


class RawSeriesStore(Mapping[str, Number]):
    """Sparse per-day series plus the intervals it is known to cover."""

    def __init__(self) -> None:
        self._values: dict[str, Number] = {}
        self._covered: list[DateRange] = []

    # -- Mapping protocol ----------------------------------------------------

    def __getitem__(self, day: DateLike) -> Number:
        return self._values[to_key(day)]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, day: object) -> bool:
        if not isinstance(day, (date, str)):
            return False
        try:
            return to_key(day) in self._values
        except InvalidArgument:
            return False

    def get(self, day: DateLike, default: Number | None = None) -> Number | None:  # type: ignore[override]
        return self._values.get(to_key(day), default)

    def as_dict(self) -> dict[str, Number]:
        """Copy of the series, ordered by date key."""
        return {key: self._values[key] for key in sorted(self._values)}

    # -- Writes --------------------------------------------------------------

    def replace(self, rows: Rows, covered: DateRange) -> None:
        """Discard everything held and load a freshly fetched window."""
        covered = require_range(covered, "covered range")
        self._values = normalize_rows(rows)
        self._covered = [covered]
        logger.debug("Series replaced: %d days over %s..%s", len(self._values), covered.start, covered.end)

    def merge(self, rows: Rows, covered: DateRange) -> None:
        """Merge a fetched window into the store.

        Days inside `covered` are authoritative from this batch: previously
        held values in that window are dropped before the batch is applied.
        """
        covered = require_range(covered, "covered range")
        start_key, end_key = to_key(covered.start), to_key(covered.end)
        kept = {k: v for k, v in self._values.items() if not start_key <= k <= end_key}
        kept.update(normalize_rows(rows))
        self._values = kept
        self._covered = coalesce_ranges([*self._covered, covered])
        logger.debug(
            "Series merged: %s..%s, now %d days in %d interval(s)",
            covered.start,
            covered.end,
            len(self._values),
            len(self._covered),
        )

    def clear(self) -> None:
        self._values = {}
        self._covered = []

    # -- Coverage ------------------------------------------------------------

    @property
    def covered_ranges(self) -> tuple[DateRange, ...]:
        return tuple(self._covered)

    @property
    def fetched_range(self) -> DateRange | None:
        """Outer min/max of everything fetched, or None before the first fetch."""
        if not self._covered:
            return None
        return DateRange(start=self._covered[0].start, end=self._covered[-1].end)

    def missing_ranges(self, wanted: DateRange) -> list[DateRange]:
        """Sub-ranges of `wanted` not yet covered by any fetch, ascending."""
        wanted = require_range(wanted, "wanted range")
        gaps: list[DateRange] = []
        cursor = wanted.start
        for interval in self._covered:
            if interval.end < cursor:
                continue
            if interval.start > wanted.end:
                break
            if interval.start > cursor:
                gaps.append(DateRange(start=cursor, end=interval.start - _ONE_DAY))
            cursor = max(cursor, interval.end + _ONE_DAY)
            if cursor > wanted.end:
                return gaps
        if cursor <= wanted.end:
            gaps.append(DateRange(start=cursor, end=wanted.end))
        return gaps

    def covers(self, wanted: DateRange) -> bool:
        return not self.missing_ranges(wanted)
