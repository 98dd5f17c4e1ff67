"""Tests for monthly time series."""

import pytest

from sales_insights.analytics.series import (
    avg_deal_size_by_month,
    pipeline_by_month,
    revenue_by_month,
    sales_cycle_by_month,
    win_rate_by_month,
)
from sales_insights.store import CanonicalStore

ALL_SERIES = [pipeline_by_month, win_rate_by_month, sales_cycle_by_month, avg_deal_size_by_month, revenue_by_month]


class TestWindowCompleteness:
    @pytest.mark.parametrize("fn", ALL_SERIES)
    @pytest.mark.parametrize("months", [3, 7, 36])
    def test_exactly_n_increasing_points(self, sample_store: CanonicalStore, fn, months: int) -> None:
        points = fn(sample_store, "2025-03", months)
        keys = [p["month"] for p in points]
        assert len(points) == months
        assert keys == sorted(set(keys))
        assert keys[-1] == "2025-03"


class TestSeriesValues:
    """Hand-checked values for the sample snapshot."""

    def test_revenue_by_month(self, sample_store: CanonicalStore) -> None:
        values = {p["month"]: p["value"] for p in revenue_by_month(sample_store, "2025-03", 6)}
        assert values == {
            "2024-10": 0, "2024-11": 0, "2024-12": 30000, "2025-01": 0, "2025-02": 0, "2025-03": 60000,
        }

    def test_pipeline_by_month(self, sample_store: CanonicalStore) -> None:
        points = pipeline_by_month(sample_store, "2025-03", 3)
        assert [p["value"] for p in points] == [55000, 0, 10000]

    def test_win_rate_bounds(self, sample_store: CanonicalStore) -> None:
        points = win_rate_by_month(sample_store, "2025-03", 12)
        assert all(0 <= p["value"] <= 1 for p in points)
        assert points[-1]["value"] == 0.5
        assert points[-2]["value"] == 0.0

    def test_sales_cycle_and_avg_size(self, sample_store: CanonicalStore) -> None:
        cycle = sales_cycle_by_month(sample_store, "2025-03", 3)
        assert [p["value"] for p in cycle] == [0.0, 36.0, 46.0]
        avg = avg_deal_size_by_month(sample_store, "2025-03", 3)
        # January: d1 60k, d2 20k, d3 40k, d7 15k
        assert avg[0]["value"] == 33750.0
