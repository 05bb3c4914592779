"""
Chart Source — Supabase-backed lookups for dashboards, chart config and raw rows.

Row shapes (as stored by the dashboard editor):
  dashboard: {name, dateFilter: {name, initialDateRange}}
  chart:     {id, dashboardName, name, sqlQuery, yAxisField, chartType,
              dateField: {field, table}}
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from chartboard.config import settings
from chartboard.models.charts import ChartConfig, DashboardConfig
from chartboard.services.charts.date_keys import DateLike
from chartboard.services.charts.errors import ChartNotFound, IncompleteConfig
from chartboard.services.charts.ranges import DateRange
from chartboard.services.charts.series_store import Number, normalize_rows
from chartboard.services.supabase import (
    fetch_first_or_none,
    fetch_rows,
    get_supabase_client,
)

logger = logging.getLogger(__name__)

_CHART_KINDS = {"line", "bar"}


# =============================================================================
# CHART CONFIG
# =============================================================================


def chart_config_from_row(row: dict[str, Any], chart_id: str | None = None) -> ChartConfig:
    """Build a ChartConfig from a `chart` row.

    Raises IncompleteConfig when the row can't identify what to query.
    """
    chart_id = str(row.get("id", chart_id))
    date_field = row.get("dateField")
    if not isinstance(date_field, dict):
        date_field = {}

    value_expression = row.get("sqlQuery")
    date_column = date_field.get("field")
    table = date_field.get("table")

    missing = [
        name
        for name, value in (
            ("sqlQuery", value_expression),
            ("dateField.field", date_column),
            ("dateField.table", table),
        )
        if not value
    ]
    if missing:
        raise IncompleteConfig(chart_id, missing)

    chart_kind = str(row.get("chartType") or "line").lower()
    if chart_kind not in _CHART_KINDS:
        logger.warning("Chart %s: unknown chartType %r, rendering as line", chart_id, chart_kind)
        chart_kind = "line"

    return ChartConfig(
        id=chart_id,
        value_expression=value_expression,
        date_column=date_column,
        table=table,
        display_name=row.get("name") or row.get("yAxisField") or value_expression,
        chart_kind=chart_kind,
    )


async def fetch_chart_config(chart_id: str) -> ChartConfig:
    """Single-row lookup of a chart's query metadata by id."""
    sb = await get_supabase_client()
    row = await fetch_first_or_none(
        sb.table(settings.chart_table).select("*").eq("id", chart_id)
    )
    if row is None:
        raise ChartNotFound(f"Chart {chart_id} not found")
    return chart_config_from_row(row, chart_id)


# =============================================================================
# DASHBOARD
# =============================================================================


async def fetch_dashboard(name: str) -> DashboardConfig:
    """Look up a dashboard row by name."""
    sb = await get_supabase_client()
    row = await fetch_first_or_none(
        sb.table(settings.dashboard_table).select("*").eq("name", name)
    )
    if row is None:
        raise ChartNotFound(f"Dashboard {name} not found")

    date_filter = row.get("dateFilter")
    if not isinstance(date_filter, dict):
        date_filter = {}
    return DashboardConfig(
        name=row["name"],
        title=date_filter.get("name") or row["name"],
        initial_preset=date_filter.get("initialDateRange"),
    )


async def list_chart_ids(dashboard_name: str) -> list[str]:
    """Ids of the charts on a dashboard, ascending."""
    sb = await get_supabase_client()
    rows = await fetch_rows(
        sb.table(settings.chart_table)
        .select("id")
        .eq("dashboardName", dashboard_name)
        .order("id", desc=False)
    )
    return [str(row["id"]) for row in rows]


# =============================================================================
# RAW SERIES
# =============================================================================


def _result_key(value_expression: str) -> str:
    """Column name PostgREST returns for a select expression (`alias:expr` → alias)."""
    return value_expression.split(":", 1)[0].strip()


def _coerce_number(value: Any) -> Number | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Chart source: dropping non-numeric value %r", value)
        return None


async def fetch_raw_series(
    table: str,
    date_column: str,
    value_expression: str,
    start: DateLike,
    end: DateLike,
) -> dict[str, Number]:
    """Fetch per-day values with `date_column` inside [start, end] inclusive.

    Timestamps are trimmed to their UTC calendar day; rows landing on the
    same day are summed.
    """
    window = DateRange.of(start, end)
    day_after: date = window.end + timedelta(days=1)

    sb = await get_supabase_client()
    rows = await fetch_rows(
        sb.table(table)
        .select(f"{date_column}, {value_expression}")
        .gte(date_column, window.start.isoformat())
        .lt(date_column, day_after.isoformat())
        .order(date_column, desc=False)
    )

    value_key = _result_key(value_expression)
    series = normalize_rows(
        (row[date_column], _coerce_number(row.get(value_key)))
        for row in rows
        if row.get(date_column) is not None
    )
    logger.info(
        "Fetched %d row(s) → %d day(s) from %s for %s..%s",
        len(rows),
        len(series),
        table,
        window.start,
        window.end,
    )
    return series
