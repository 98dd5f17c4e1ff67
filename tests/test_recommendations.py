"""Tests for recommendations."""

from datetime import date

from sales_insights.analytics.recommendations import fallback_recommendations, recommendations
from sales_insights.analytics.risk import RiskParams
from sales_insights.config import Thresholds
from sales_insights.models.entities import Account, Deal, Rep, Target
from sales_insights.store import CanonicalStore


def _ids(payload: dict) -> list[str]:
    return [item["id"] for item in payload["items"]]


class TestRecommendations:
    """Tests for recommendations."""

    def test_default_sample_tops_up_with_fallbacks(self, sample_store: CanonicalStore) -> None:
        """Only the quiet-segment rule fires, so two fallbacks bring the list to three."""
        payload = recommendations(sample_store)
        assert _ids(payload) == ["rec_increase_activity_segment", "rec_general_activity", "rec_pipeline_hygiene"]
        segment = payload["items"][0]
        assert segment["filters"] == {"segment": "Unknown", "windowDays": 30}
        assert segment["metricHint"] == {"key": "segmentOpenPipeline", "value": 15000}
        assert segment["impact"] == "medium"
        assert "metricHint" not in payload["items"][1]
        assert payload["parameters"]["analysisNow"] == "2025-03-31"

    def test_short_no_activity_window_triggers_signals(self, sample_store: CanonicalStore) -> None:
        payload = recommendations(sample_store, RiskParams(stale_no_activity_days=5))
        assert _ids(payload) == ["rec_enterprise_stale", "rec_increase_activity_segment", "rec_negotiation_stale"]
        enterprise = payload["items"][0]
        assert enterprise["impact"] == "high"
        assert enterprise["metricHint"] == {"key": "enterpriseStalePipeline", "value": 40000}
        assert payload["items"][2]["metricHint"]["value"] == 40000

    def test_coach_rep(self, sample_store: CanonicalStore) -> None:
        thresholds = Thresholds(underperforming_min_closed=2)
        items = recommendations(sample_store, thresholds=thresholds)["items"]
        coach = next(i for i in items if i["id"] == "rec_coach_rep")
        assert coach["title"] == "Coach Alice on win rate"
        assert coach["filters"] == {"repId": "r1", "quarter": "Q1 2025"}
        assert coach["metricHint"]["value"] == 50.0

    def test_at_least_three_on_empty_signals(self) -> None:
        store = CanonicalStore.build(targets=[Target(month="2025-06", target=10)])
        items = recommendations(store)["items"]
        assert len(items) == 3
        assert len({i["id"] for i in items}) == 3
        assert all(i["impact"] == "low" for i in items)

    def test_never_more_than_max(self) -> None:
        """Every rule fires; the list is cut to max_recommendations."""
        accounts = [Account(account_id="a1", name="Big Co", segment="Enterprise")]
        reps = [Rep(rep_id="r1", name="Sam")]
        deals = [
            Deal(deal_id="n1", account_id="a1", rep_id="r1", stage="Negotiation", amount=100,
                 created_at=date(2025, 1, 1)),
        ] + [
            Deal(deal_id=f"l{i}", account_id="a1", rep_id="r1", stage="Closed Lost",
                 created_at=date(2025, 1, 1), closed_at=date(2025, 2, 1))
            for i in range(3)
        ]
        store = CanonicalStore.build(
            accounts=accounts, reps=reps, targets=[Target(month="2025-03", target=1)], deals=deals
        )
        assert len(recommendations(store)["items"]) == 4
        capped = recommendations(store, thresholds=Thresholds(max_recommendations=2))["items"]
        assert [i["id"] for i in capped] == ["rec_enterprise_stale", "rec_coach_rep"]

    def test_fallbacks_are_distinct(self) -> None:
        fallbacks = fallback_recommendations(RiskParams())
        assert fallbacks[0].id == "rec_general_activity"
        assert len({f.id for f in fallbacks}) == len(fallbacks) >= 3
