"""Tests for the Supabase-backed chart source."""

from __future__ import annotations

from datetime import date
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from chartboard.services.charts.errors import ChartNotFound, IncompleteConfig

# =============================================================================
# HELPERS
# =============================================================================


class _FakeResult:
    """Minimal mock for supabase execute() result."""

    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data


def _chart_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": 7,
        "dashboardName": "CompanyA",
        "name": "Revenue",
        "sqlQuery": "amount",
        "yAxisField": "amount",
        "chartType": "bar",
        "dateField": {"field": "created_at", "table": "orders"},
    }
    row.update(overrides)
    return row


def _single_row_sb(rows: list[dict[str, Any]]) -> MagicMock:
    """Supabase mock for .table().select().eq().limit().execute()."""
    sb = MagicMock()
    sb.table.return_value.select.return_value.eq.return_value.limit.return_value.execute = AsyncMock(
        return_value=_FakeResult(rows)
    )
    return sb


def _series_sb(rows: list[dict[str, Any]]) -> MagicMock:
    """Supabase mock for .table().select().gte().lt().order().execute()."""
    sb = MagicMock()
    sb.table.return_value.select.return_value.gte.return_value.lt.return_value.order.return_value.execute = AsyncMock(
        return_value=_FakeResult(rows)
    )
    return sb


def _patch_client(sb: MagicMock):  # type: ignore[no-untyped-def]
    return patch(
        "chartboard.services.charts.source.get_supabase_client",
        new_callable=AsyncMock,
        return_value=sb,
    )


# =============================================================================
# CHART CONFIG
# =============================================================================


class TestChartConfigFromRow:
    """Row → ChartConfig mapping."""

    def test_maps_fields(self) -> None:
        from chartboard.services.charts.source import chart_config_from_row

        config = chart_config_from_row(_chart_row())
        assert config.id == "7"
        assert config.value_expression == "amount"
        assert config.date_column == "created_at"
        assert config.table == "orders"
        assert config.display_name == "Revenue"
        assert config.chart_kind == "bar"

    def test_display_name_falls_back_to_y_axis(self) -> None:
        from chartboard.services.charts.source import chart_config_from_row

        config = chart_config_from_row(_chart_row(name=None, yAxisField="Orders"))
        assert config.display_name == "Orders"

    def test_unknown_chart_type_renders_as_line(self) -> None:
        from chartboard.services.charts.source import chart_config_from_row

        assert chart_config_from_row(_chart_row(chartType="pie")).chart_kind == "line"

    def test_missing_table_is_incomplete(self) -> None:
        from chartboard.services.charts.source import chart_config_from_row

        with pytest.raises(IncompleteConfig) as exc_info:
            chart_config_from_row(_chart_row(dateField={"field": "created_at"}))
        assert exc_info.value.missing == ["dateField.table"]
        assert exc_info.value.chart_id == "7"

    def test_missing_date_field_is_incomplete(self) -> None:
        from chartboard.services.charts.source import chart_config_from_row

        with pytest.raises(IncompleteConfig) as exc_info:
            chart_config_from_row(_chart_row(dateField=None, sqlQuery=""))
        assert exc_info.value.missing == ["sqlQuery", "dateField.field", "dateField.table"]


class TestFetchChartConfig:
    @pytest.mark.asyncio
    async def test_returns_config(self) -> None:
        from chartboard.services.charts.source import fetch_chart_config

        sb = _single_row_sb([_chart_row()])
        with _patch_client(sb):
            config = await fetch_chart_config("7")

        assert config.table == "orders"
        sb.table.assert_called_once_with("chart")
        sb.table.return_value.select.return_value.eq.assert_called_once_with("id", "7")

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        from chartboard.services.charts.source import fetch_chart_config

        with _patch_client(_single_row_sb([])):
            with pytest.raises(ChartNotFound):
                await fetch_chart_config("999")


# =============================================================================
# DASHBOARD
# =============================================================================


class TestDashboard:
    @pytest.mark.asyncio
    async def test_fetch_dashboard(self) -> None:
        from chartboard.services.charts.source import fetch_dashboard

        row = {
            "name": "CompanyA",
            "dateFilter": {"name": "Sales overview", "initialDateRange": "LAST_90_DAYS"},
        }
        with _patch_client(_single_row_sb([row])):
            dashboard = await fetch_dashboard("CompanyA")

        assert dashboard.name == "CompanyA"
        assert dashboard.title == "Sales overview"
        assert dashboard.initial_preset == "LAST_90_DAYS"

    @pytest.mark.asyncio
    async def test_fetch_dashboard_without_filter(self) -> None:
        from chartboard.services.charts.source import fetch_dashboard

        with _patch_client(_single_row_sb([{"name": "Bare"}])):
            dashboard = await fetch_dashboard("Bare")

        assert dashboard.title == "Bare"
        assert dashboard.initial_preset is None

    @pytest.mark.asyncio
    async def test_fetch_dashboard_not_found(self) -> None:
        from chartboard.services.charts.source import fetch_dashboard

        with _patch_client(_single_row_sb([])):
            with pytest.raises(ChartNotFound):
                await fetch_dashboard("Nope")

    @pytest.mark.asyncio
    async def test_list_chart_ids(self) -> None:
        from chartboard.services.charts.source import list_chart_ids

        sb = MagicMock()
        chain = sb.table.return_value.select.return_value.eq.return_value.order.return_value
        chain.execute = AsyncMock(return_value=_FakeResult([{"id": 1}, {"id": 2}]))

        with _patch_client(sb):
            ids = await list_chart_ids("CompanyA")

        assert ids == ["1", "2"]
        sb.table.return_value.select.return_value.eq.assert_called_once_with(
            "dashboardName", "CompanyA"
        )
        sb.table.return_value.select.return_value.eq.return_value.order.assert_called_once_with(
            "id", desc=False
        )


# =============================================================================
# RAW SERIES
# =============================================================================


class TestFetchRawSeries:
    @pytest.mark.asyncio
    async def test_rows_trimmed_to_day_keys(self) -> None:
        from chartboard.services.charts.source import fetch_raw_series

        rows = [
            {"created_at": "2024-01-01T09:30:00+00:00", "amount": 10},
            {"created_at": "2024-01-01T18:00:00+00:00", "amount": 5},
            {"created_at": "2024-01-03T00:00:00+00:00", "amount": "2.5"},
            {"created_at": "2024-01-04T00:00:00+00:00", "amount": None},
        ]
        sb = _series_sb(rows)
        with _patch_client(sb):
            series = await fetch_raw_series(
                "orders", "created_at", "amount", date(2024, 1, 1), date(2024, 1, 5)
            )

        assert series == {"2024-01-01": 15, "2024-01-03": 2.5}

    @pytest.mark.asyncio
    async def test_query_bounds_are_inclusive_days(self) -> None:
        from chartboard.services.charts.source import fetch_raw_series

        sb = _series_sb([])
        with _patch_client(sb):
            await fetch_raw_series(
                "orders", "created_at", "amount", date(2024, 1, 1), date(2024, 1, 5)
            )

        select = sb.table.return_value.select
        select.assert_called_once_with("created_at, amount")
        select.return_value.gte.assert_called_once_with("created_at", "2024-01-01")
        select.return_value.gte.return_value.lt.assert_called_once_with(
            "created_at", "2024-01-06"
        )
        select.return_value.gte.return_value.lt.return_value.order.assert_called_once_with(
            "created_at", desc=False
        )

    @pytest.mark.asyncio
    async def test_aliased_expression_reads_alias_column(self) -> None:
        from chartboard.services.charts.source import fetch_raw_series

        rows = [{"day": "2024-01-02", "total": 4}]
        with _patch_client(_series_sb(rows)):
            series = await fetch_raw_series(
                "daily_totals", "day", "total:amount.sum()", "2024-01-01", "2024-01-02"
            )

        assert series == {"2024-01-02": 4}

    @pytest.mark.asyncio
    async def test_non_numeric_values_dropped(self) -> None:
        from chartboard.services.charts.source import fetch_raw_series

        rows = [
            {"created_at": "2024-01-01", "amount": "n/a"},
            {"created_at": "2024-01-02", "amount": True},
            {"created_at": None, "amount": 3},
        ]
        with _patch_client(_series_sb(rows)):
            series = await fetch_raw_series(
                "orders", "created_at", "amount", "2024-01-01", "2024-01-02"
            )

        assert series == {}
