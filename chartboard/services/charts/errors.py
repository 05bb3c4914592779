"""
Chart Errors — Exception taxonomy for the bucketing engine and chart source.
"""

from __future__ import annotations


class InvalidArgument(ValueError):
    """Malformed or missing date range / date input. Never retried."""


class IncompleteConfig(Exception):
    """Chart config row is missing fields required to fetch its series."""

    def __init__(self, chart_id: str, missing: list[str]) -> None:
        self.chart_id = chart_id
        self.missing = missing
        super().__init__(
            f"Chart {chart_id} is missing required fields: {', '.join(missing)}"
        )


class ChartNotFound(LookupError):
    """No chart or dashboard row matched the lookup."""
