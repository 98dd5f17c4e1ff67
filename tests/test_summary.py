"""Tests for the quarter summary."""

from datetime import date

from sales_insights.analytics.summary import quarter_summary
from sales_insights.models.entities import Account, Deal, Rep, Target
from sales_insights.store import CanonicalStore


class TestQuarterSummary:
    """Tests for quarter_summary."""

    def test_single_target_month(self) -> None:
        """Only March has a target; one 60k win in March -> Q1 revenue 60k, gap -40%."""
        store = CanonicalStore.build(
            accounts=[Account(account_id="a1", name="Acme")],
            reps=[Rep(rep_id="r1", name="Alice")],
            targets=[Target(month="2025-03", target=100000)],
            deals=[
                Deal(deal_id="d1", account_id="a1", rep_id="r1", stage="Closed Won", amount=60000,
                     created_at=date(2025, 2, 1), closed_at=date(2025, 3, 10)),
            ],
        )
        summary = quarter_summary(store)
        assert summary["currentQuarter"] == "Q1 2025"
        assert summary["revenue"] == 60000
        assert summary["target"] == 100000
        assert summary["gap"] == -40000
        assert summary["gapPct"] == -40.0
        assert summary["period"] == {"start": "2025-01-01", "end": "2025-03-31"}

    def test_qoq_change(self, sample_store: CanonicalStore) -> None:
        summary = quarter_summary(sample_store)
        assert summary["revenue"] == 60000
        assert summary["target"] == 200000
        assert summary["gapPct"] == -70.0
        assert summary["change"] == {"type": "QoQ", "prevQuarterRevenue": 30000, "changePct": 100.0}

    def test_no_target_gives_null_gap_pct(self) -> None:
        store = CanonicalStore.build(
            deals=[
                Deal(deal_id="d1", account_id="a1", rep_id="r1", stage="Closed Won", amount=None,
                     created_at=date(2025, 4, 1), closed_at=date(2025, 5, 2)),
            ],
        )
        summary = quarter_summary(store)
        assert summary["currentQuarter"] == "Q2 2025"
        assert summary["revenue"] == 0
        assert summary["gapPct"] is None
        assert summary["change"]["changePct"] == 0.0
