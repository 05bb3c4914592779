"""
Dashboard Router — Dashboard metadata and bucketed chart series.

Endpoints:
  GET /dashboards                    — Default dashboard (settings.default_dashboard_name)
  GET /dashboards/{name}             — Dashboard title, chart ids, resolved default ranges
  GET /charts/{chart_id}/series      — Buckets + summary for a range and comparison
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query

from chartboard.config import settings
from chartboard.models.charts import (
    BucketOut,
    ChartSeriesResponse,
    DashboardResponse,
    DateRangeOut,
    PresetOption,
    SummaryOut,
)
from chartboard.services.charts.errors import (
    ChartNotFound,
    IncompleteConfig,
    InvalidArgument,
)
from chartboard.services.charts.presets import (
    ComparisonPreset,
    RangePreset,
    comparison_range,
    preset_range,
)
from chartboard.services.charts.ranges import DateRange
from chartboard.services.charts.session import ChartView, get_session_registry
from chartboard.services.charts.source import fetch_dashboard, list_chart_ids

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_RANGE_PRESET = RangePreset.LAST_30_DAYS


# =============================================================================
# DEPENDENCIES
# =============================================================================


def get_today() -> date:
    """Today's date on the dashboard clock, read fresh on every request."""
    return datetime.now(ZoneInfo(settings.dashboard_timezone)).date()


# =============================================================================
# DASHBOARDS
# =============================================================================


@router.get("/dashboards")
async def get_default_dashboard(
    comparison: ComparisonPreset = Query(default=ComparisonPreset.PREVIOUS_PERIOD),
    today: date = Depends(get_today),
) -> DashboardResponse:
    """Get the configured default dashboard."""
    return await get_dashboard(
        name=settings.default_dashboard_name, comparison=comparison, today=today
    )


@router.get("/dashboards/{name}")
async def get_dashboard(
    name: str,
    comparison: ComparisonPreset = Query(default=ComparisonPreset.PREVIOUS_PERIOD),
    today: date = Depends(get_today),
) -> DashboardResponse:
    """Get dashboard metadata, its charts, and the initial date ranges."""
    try:
        dashboard = await fetch_dashboard(name)
        chart_ids = await list_chart_ids(dashboard.name)
    except ChartNotFound:
        raise HTTPException(status_code=404, detail="Dashboard not found")
    except Exception:
        logger.exception("Dashboard: failed to fetch %s", name)
        raise HTTPException(status_code=500, detail="Failed to fetch dashboard")

    preset = RangePreset.from_dashboard_code(dashboard.initial_preset)
    primary: DateRange | None = None
    comparison_window: DateRange | None = None
    if preset is not None:
        primary = preset_range(preset, today=today)
        comparison_window = comparison_range(comparison, primary, today=today)
    elif dashboard.initial_preset:
        logger.warning(
            "Dashboard %s: unknown initialDateRange %r", name, dashboard.initial_preset
        )

    return DashboardResponse(
        name=dashboard.name,
        title=dashboard.title,
        chart_ids=chart_ids,
        preset=preset.value if preset else None,
        range=_range_out(primary) if primary else None,
        comparison=comparison.value,
        comparison_range=_range_out(comparison_window) if comparison_window else None,
        range_presets=[PresetOption(value=p.value, label=p.label) for p in RangePreset],
        comparison_presets=[
            PresetOption(value=p.value, label=p.label) for p in ComparisonPreset
        ],
    )


# =============================================================================
# CHART SERIES
# =============================================================================


@router.get("/charts/{chart_id}/series")
async def get_chart_series(
    chart_id: str,
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    preset: RangePreset | None = Query(default=None),
    comparison: ComparisonPreset = Query(default=ComparisonPreset.PREVIOUS_PERIOD),
    today: date = Depends(get_today),
) -> ChartSeriesResponse:
    """Bucketed series and summary for one chart.

    Explicit start/end win over `preset`; with neither, the last 30 days.
    """
    try:
        primary = resolve_primary_range(start=start, end=end, preset=preset, today=today)
        comparison_window = comparison_range(comparison, primary, today=today)
    except InvalidArgument as e:
        raise HTTPException(status_code=422, detail=str(e))

    registry = get_session_registry()
    try:
        session = await registry.get(chart_id)
    except ChartNotFound:
        raise HTTPException(status_code=404, detail="Chart not found")
    except IncompleteConfig as e:
        logger.warning("Chart unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Chart unavailable")
    except Exception:
        logger.exception("Chart %s: failed to fetch config", chart_id)
        raise HTTPException(status_code=500, detail="Failed to fetch chart")

    try:
        view = await session.load(primary, comparison_window)
    except InvalidArgument as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception:
        logger.exception("Chart %s: failed to fetch series", chart_id)
        raise HTTPException(status_code=500, detail="Failed to fetch chart data")

    if view is None:
        raise HTTPException(status_code=409, detail="Superseded by a newer request")

    return series_response(view)


# =============================================================================
# HELPERS
# =============================================================================


def resolve_primary_range(
    *,
    start: date | None,
    end: date | None,
    preset: RangePreset | None,
    today: date,
) -> DateRange:
    """Pick the primary range from explicit bounds, a preset, or the default."""
    if start is not None or end is not None:
        return DateRange.of(start, end)
    return preset_range(preset or DEFAULT_RANGE_PRESET, today=today)


def _range_out(date_range: DateRange) -> DateRangeOut:
    return DateRangeOut(start=date_range.start, end=date_range.end)


def series_response(view: ChartView) -> ChartSeriesResponse:
    summary = view.summary
    return ChartSeriesResponse(
        chart_id=view.config.id,
        display_name=view.config.display_name,
        chart_kind=view.config.chart_kind,
        granularity=view.granularity.value,
        range=_range_out(view.primary),
        comparison_range=_range_out(view.comparison),
        buckets=[
            BucketOut(
                label=b.label, value=b.value, comparison_value=b.comparison_value
            )
            for b in view.buckets
        ],
        summary=SummaryOut(
            total=summary.total,
            comparison_total=summary.comparison_total,
            total_display=summary.total_display,
            comparison_total_display=summary.comparison_total_display,
            percent_delta=summary.percent_delta,
            is_increase=summary.is_increase,
        ),
    )
