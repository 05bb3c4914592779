"""
Chart Session — Per-chart fetch lifecycle around the bucketing engine.

A session owns one chart's RawSeriesStore. Each load() gates on coverage,
fetches what's missing, then rebuilds buckets and the summary.

The session is shared by every request for the chart. In incremental mode
each fetched window is authoritative for its own days, so a fetch that
resolves after a newer load has started is still merged and rendered for
its own ranges. In replace mode the store holds a single window, so such a
fetch is discarded (last request wins) and load() returns None.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import date

from chartboard.models.charts import ChartConfig
from chartboard.services.charts.buckets import Bucket, build_buckets
from chartboard.services.charts.granularity import Granularity, classify
from chartboard.services.charts.ranges import DateRange, require_range
from chartboard.services.charts.series_store import (
    Number,
    RawSeriesStore,
    coalesce_ranges,
)
from chartboard.services.charts.source import fetch_chart_config, fetch_raw_series
from chartboard.services.charts.staleness import fetch_window, is_stale
from chartboard.services.charts.summary import Summary, summarize_buckets

logger = logging.getLogger(__name__)

SeriesFetcher = Callable[[str, str, str, date, date], Awaitable[Mapping[str, Number]]]
ConfigLoader = Callable[[str], Awaitable[ChartConfig]]


@dataclass(frozen=True, slots=True)
class ChartView:
    """Everything the presentation layer needs to draw one chart."""

    config: ChartConfig
    granularity: Granularity
    primary: DateRange
    comparison: DateRange
    buckets: tuple[Bucket, ...]
    summary: Summary


class ChartSession:
    """Holds one chart's raw series across range changes."""

    def __init__(
        self,
        config: ChartConfig,
        fetcher: SeriesFetcher = fetch_raw_series,
        *,
        incremental: bool = True,
    ) -> None:
        self.config = config
        self.store = RawSeriesStore()
        self._fetcher = fetcher
        self._incremental = incremental
        self._generation = 0

    def windows_to_fetch(self, primary: DateRange, comparison: DateRange) -> list[DateRange]:
        """Date windows that must be fetched before rendering these ranges."""
        if self._incremental:
            gaps = self.store.missing_ranges(primary) + self.store.missing_ranges(comparison)
            return coalesce_ranges(gaps)
        if is_stale(primary, comparison, self.store.fetched_range):
            return [fetch_window(primary, comparison)]
        return []

    async def load(
        self,
        primary: DateRange | None,
        comparison: DateRange | None,
    ) -> ChartView | None:
        """Fetch as needed and render.

        Returns None in replace mode when a newer fetching load started
        while this one was awaiting its rows.
        """
        primary = require_range(primary, "primary range")
        comparison = require_range(comparison, "comparison range")

        windows = self.windows_to_fetch(primary, comparison)
        if windows:
            self._generation += 1
            generation = self._generation
            batches: list[tuple[DateRange, Mapping[str, Number]]] = []
            for window in windows:
                rows = await self._fetcher(
                    self.config.table,
                    self.config.date_column,
                    self.config.value_expression,
                    window.start,
                    window.end,
                )
                batches.append((window, rows))

            if generation != self._generation and not self._incremental:
                logger.warning(
                    "Chart %s: discarding superseded fetch for %s..%s",
                    self.config.id,
                    primary.start,
                    primary.end,
                )
                return None

            for window, rows in batches:
                if self._incremental:
                    self.store.merge(rows, window)
                else:
                    self.store.replace(rows, window)

        return self.render(primary, comparison)

    def render(self, primary: DateRange, comparison: DateRange) -> ChartView:
        """Rebuild buckets and summary from whatever the store holds."""
        granularity = classify(primary)
        buckets = build_buckets(primary, comparison, self.store, granularity)
        return ChartView(
            config=self.config,
            granularity=granularity,
            primary=primary,
            comparison=comparison,
            buckets=tuple(buckets),
            summary=summarize_buckets(buckets),
        )

    def invalidate(self) -> None:
        """Drop the held series so the next load refetches everything."""
        self.store.clear()


class ChartSessionRegistry:
    """Caches one ChartSession per chart id; config is fetched once per chart."""

    def __init__(
        self,
        *,
        config_loader: ConfigLoader = fetch_chart_config,
        fetcher: SeriesFetcher = fetch_raw_series,
        incremental: bool = True,
    ) -> None:
        self._config_loader = config_loader
        self._fetcher = fetcher
        self._incremental = incremental
        self._sessions: dict[str, ChartSession] = {}

    async def get(self, chart_id: str) -> ChartSession:
        session = self._sessions.get(chart_id)
        if session is None:
            config = await self._config_loader(chart_id)
            # Another request may have created it while the config was loading
            session = self._sessions.setdefault(
                chart_id,
                ChartSession(config, self._fetcher, incremental=self._incremental),
            )
            logger.info("Chart session created: %s (%s)", chart_id, config.display_name)
        return session

    def __len__(self) -> int:
        return len(self._sessions)

    def reset(self) -> None:
        """Drop all sessions (for testing)."""
        self._sessions.clear()


# Singleton
_registry: ChartSessionRegistry | None = None


def get_session_registry() -> ChartSessionRegistry:
    """Get or create the singleton session registry."""
    global _registry
    if _registry is None:
        from chartboard.config import settings

        _registry = ChartSessionRegistry(incremental=settings.chart_incremental_fetch)
    return _registry


def reset_session_registry() -> None:
    """Reset the singleton (for testing)."""
    global _registry
    _registry = None
