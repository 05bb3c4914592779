"""
Chart Models — Pydantic models for chart/dashboard config and series responses.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ChartKind = Literal["line", "bar"]

# =============================================================================
# INTERNAL MODELS
# =============================================================================


class ChartConfig(BaseModel):
    """Chart row from the `chart` table. Immutable once fetched."""

    model_config = ConfigDict(frozen=True)

    id: str
    value_expression: str
    date_column: str
    table: str
    display_name: str
    chart_kind: ChartKind = "line"


class DashboardConfig(BaseModel):
    """Dashboard row from the `dashboard` table."""

    model_config = ConfigDict(frozen=True)

    name: str
    title: str
    initial_preset: str | None = None


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class DateRangeOut(BaseModel):
    """Inclusive date window."""

    start: date
    end: date


class BucketOut(BaseModel):
    """Single bucket in a chart series."""

    label: str
    value: int | None  # None = no data, distinct from 0
    comparison_value: int | None


class SummaryOut(BaseModel):
    """Header totals for a chart."""

    total: int | float
    comparison_total: int | float
    total_display: str
    comparison_total_display: str
    percent_delta: str
    is_increase: bool


class ChartSeriesResponse(BaseModel):
    """Full chart render payload."""

    chart_id: str
    display_name: str
    chart_kind: ChartKind
    granularity: Literal["DAYS", "WEEKS", "MONTHS"]
    range: DateRangeOut
    comparison_range: DateRangeOut
    buckets: list[BucketOut] = Field(default_factory=list)
    summary: SummaryOut


class PresetOption(BaseModel):
    """Dropdown option for a range or comparison preset."""

    value: str
    label: str


class DashboardResponse(BaseModel):
    """Dashboard metadata plus resolved default ranges."""

    name: str
    title: str
    chart_ids: list[str] = Field(default_factory=list)
    preset: str | None = None
    range: DateRangeOut | None = None
    comparison: str
    comparison_range: DateRangeOut | None = None
    range_presets: list[PresetOption] = Field(default_factory=list)
    comparison_presets: list[PresetOption] = Field(default_factory=list)
