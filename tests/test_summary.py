"""
Tests for the summary aggregator.

Covers: percent-delta sign/rounding, the zero-mean case, display formatting,
and totals computed from buckets.
"""

from __future__ import annotations

from datetime import date

import pytest

from chartboard.services.charts.buckets import Bucket, build_buckets
from chartboard.services.charts.granularity import Granularity
from chartboard.services.charts.ranges import DateRange
from chartboard.services.charts.summary import (
    NOT_AVAILABLE,
    format_total,
    percent_delta,
    summarize,
    summarize_buckets,
)

# ===========================================================================
# percent_delta
# ===========================================================================


@pytest.mark.unit
class TestPercentDelta:
    def test_increase(self) -> None:
        assert percent_delta(150, 100) == "+40.0%"

    def test_decrease(self) -> None:
        assert percent_delta(100, 150) == "-40.0%"

    def test_one_decimal_place(self) -> None:
        # 100 * 1 / 2.5 = 40.0; 100 * 1 / 1.5 = 66.666...
        assert percent_delta(2, 1) == "+66.7%"

    def test_negative_totals_take_magnitude_of_mean(self) -> None:
        # mean is -20; the sign comes only from the direction of change
        assert percent_delta(-10, -30) == "+100.0%"
        assert percent_delta(-30, -10) == "-100.0%"

    def test_equal_nonzero_totals(self) -> None:
        assert percent_delta(50, 50) == "-0.0%"

    def test_both_zero(self) -> None:
        assert percent_delta(0, 0) == "0.0%"

    def test_zero_mean_with_different_totals(self) -> None:
        assert percent_delta(5, -5) == NOT_AVAILABLE

    def test_from_zero_baseline(self) -> None:
        assert percent_delta(10, 0) == "+200.0%"


# ===========================================================================
# format_total
# ===========================================================================


@pytest.mark.unit
class TestFormatTotal:
    def test_integral_has_no_decimals(self) -> None:
        assert format_total(1234567) == "1,234,567"

    def test_integral_float_has_no_decimals(self) -> None:
        assert format_total(1500.0) == "1,500"

    def test_fractional_has_two_decimals(self) -> None:
        assert format_total(1234.5678) == "1,234.57"

    def test_small_fraction_padded(self) -> None:
        assert format_total(0.5) == "0.50"

    def test_small_integer(self) -> None:
        assert format_total(42) == "42"


# ===========================================================================
# summarize
# ===========================================================================


@pytest.mark.unit
class TestSummarize:
    def test_summary_fields(self) -> None:
        summary = summarize(150, 100)
        assert summary.total == 150
        assert summary.comparison_total == 100
        assert summary.percent_delta == "+40.0%"
        assert summary.is_increase is True
        assert summary.total_display == "150"

    def test_summarize_buckets_skips_nulls(self) -> None:
        buckets = [
            Bucket(label="Jan 1", value=100, comparison_value=None),
            Bucket(label="2", value=None, comparison_value=60),
            Bucket(label="Jan 3", value=50, comparison_value=40),
        ]
        summary = summarize_buckets(buckets)
        assert summary.total == 150
        assert summary.comparison_total == 100
        assert summary.percent_delta == "+40.0%"

    def test_fractional_daily_values_survive_bucket_rounding(self) -> None:
        series = {"2024-01-01": 0.25, "2024-01-02": 0.25, "2024-01-03": 1.25, "2023-12-30": 0.5}
        buckets = build_buckets(
            DateRange(start=date(2024, 1, 1), end=date(2024, 1, 3)),
            DateRange(start=date(2023, 12, 29), end=date(2023, 12, 31)),
            series,
            Granularity.DAYS,
        )
        assert [b.value for b in buckets] == [0, 0, 1]

        summary = summarize_buckets(buckets)
        assert summary.total == 1.75
        assert summary.total_display == "1.75"
        assert summary.comparison_total == 0.5
        assert summary.comparison_total_display == "0.50"
        assert summary.percent_delta == "+111.1%"

    def test_short_comparison_tail_excluded_from_exact_total(self) -> None:
        series = {"2024-03-01": 1.5, "2024-03-02": 1.5, "2024-02-28": 0.5, "2024-02-29": 0.25}
        buckets = build_buckets(
            DateRange(start=date(2024, 3, 1), end=date(2024, 3, 2)),
            DateRange(start=date(2024, 2, 28), end=date(2024, 2, 28)),
            series,
            Granularity.DAYS,
        )
        summary = summarize_buckets(buckets)
        assert summary.total == 3.0
        assert summary.comparison_total == 0.5

    def test_summarize_empty(self) -> None:
        summary = summarize_buckets([])
        assert summary.total == 0
        assert summary.comparison_total == 0
        assert summary.percent_delta == "0.0%"
        assert summary.is_increase is False

    def test_large_totals_display(self) -> None:
        summary = summarize(12500, 10000)
        assert summary.total_display == "12,500"
        assert summary.comparison_total_display == "10,000"
        assert summary.percent_delta == "+22.2%"
