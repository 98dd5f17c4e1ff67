"""Query surface: endpoint name + raw params -> {"status": "ok", <key>: payload} envelope."""

import logging
from typing import Any, Callable, Mapping, Optional

from sales_insights import analytics
from sales_insights.analytics.periods import reference_month
from sales_insights.analytics.risk import RiskParams
from sales_insights.config import AnalyticsConfig
from sales_insights.errors import SalesInsightsError, UnknownEndpointError
from sales_insights.query.params import clamp_int, parse_month, parse_text
from sales_insights.store.canonical import CanonicalStore

logger = logging.getLogger(__name__)

Params = Mapping[str, Any]
Handler = Callable[[Params], Any]

# Monthly series endpoints: name -> (aggregation, default months)
SERIES_ENDPOINTS: dict[str, tuple[Callable, int]] = {
    "pipeline-by-month": (analytics.pipeline_by_month, 12),
    "winrate-by-month": (analytics.win_rate_by_month, 12),
    "salescycle-by-month": (analytics.sales_cycle_by_month, 12),
    "avgdealsize-by-month": (analytics.avg_deal_size_by_month, 12),
    "revenue-by-month": (analytics.revenue_by_month, 6),
}


class QueryService:
    """
    Dispatches named queries against one CanonicalStore.
    Parameters are parsed leniently (out-of-range values clamp, garbage falls back to defaults).
    """

    def __init__(self, store: CanonicalStore, config: Optional[AnalyticsConfig] = None):
        self._store = store
        self._config = config or AnalyticsConfig()
        self._endpoints: dict[str, tuple[str, Handler]] = {
            "summary": ("summary", self._summary),
            "drivers": ("drivers", self._drivers),
            "risk-factors": ("riskFactors", self._risk_factors),
            "recommendations": ("recommendations", self._recommendations),
            "deals-by-stage": ("stageCounts", self._deals_by_stage),
            "closed-won-by-rep": ("pie", self._closed_won_pie),
            "closed-lost-by-rep": ("pie", self._closed_lost_pie),
            "stage-by-rep-heatmap": ("heatmap", self._heatmap),
            "sales-cycle-by-rep": ("salesCycleByRep", self._sales_cycle_by_rep),
            "segment-stage-industry": ("segmentStageIndustry", self._segment_stage_industry),
            "stale-open-deals": ("staleOpenDeals", self._stale_open_deals),
            "open-deals-latest-activity": ("latestActivity", self._latest_activity),
            "closed-won-revenue-by-rep": ("repRevenue", self._rep_revenue),
        }
        for name, (fn, default_months) in SERIES_ENDPOINTS.items():
            self._endpoints[name] = ("series", self._series_handler(fn, default_months))

    def endpoints(self) -> list[str]:
        """Registered endpoint names."""
        return list(self._endpoints)

    def health(self) -> dict[str, str]:
        return {"status": "ok"}

    def handle(self, endpoint: str, params: Optional[Params] = None) -> dict[str, Any]:
        """
        Run one query. Raises UnknownEndpointError for unregistered names; any
        failure inside the aggregation is logged and reported as an error envelope.
        """
        entry = self._endpoints.get(endpoint)
        if entry is None:
            raise UnknownEndpointError(f"Unknown endpoint: {endpoint}. Available: {self.endpoints()}")
        key, handler = entry
        try:
            payload = handler(params or {})
        except SalesInsightsError as e:
            logger.warning("Query %s failed: %s", endpoint, e)
            return {"status": "error", "error": str(e)}
        except Exception:
            logger.exception("Query %s failed", endpoint)
            return {"status": "error", "error": "Internal error"}
        logger.debug("Query %s ok", endpoint)
        return {"status": "ok", key: payload}

    # --- handlers ---

    def _summary(self, params: Params) -> Any:
        return analytics.quarter_summary(self._store)

    def _drivers(self, params: Params) -> Any:
        return analytics.revenue_drivers(self._store)

    def _risk_params(self, params: Params) -> RiskParams:
        return RiskParams(
            stale_no_activity_days=clamp_int(params.get("staleNoActivityDays"), 14, 1, 180),
            stale_min_age_days=clamp_int(params.get("staleMinAgeDays"), 30, 1, 365),
            low_activity_window_days=clamp_int(params.get("lowActivityWindowDays"), 30, 7, 365),
            low_activity_max_count=clamp_int(params.get("lowActivityMaxCount"), 1, 0, 50),
            limit=clamp_int(params.get("limit"), 10, 1, 50),
        )

    def _risk_factors(self, params: Params) -> Any:
        return analytics.risk_factors(self._store, self._risk_params(params), self._config.thresholds)

    def _recommendations(self, params: Params) -> Any:
        return analytics.recommendations(self._store, self._risk_params(params), self._config.thresholds)

    def _series_handler(self, fn: Callable, default_months: int) -> Handler:
        def _handler(params: Params) -> Any:
            months = clamp_int(params.get("months"), default_months, 3, 36)
            end_month = parse_month(params.get("endMonth"), "")
            return fn(self._store, end_month or reference_month(self._store), months)

        return _handler

    def _deals_by_stage(self, params: Params) -> Any:
        return analytics.deals_by_stage(self._store)

    def _closed_won_pie(self, params: Params) -> Any:
        return analytics.closed_won_pie(self._store, top=clamp_int(params.get("top"), 8, 3, 20))

    def _closed_lost_pie(self, params: Params) -> Any:
        return analytics.closed_lost_pie(self._store, top=clamp_int(params.get("top"), 8, 3, 20))

    def _heatmap(self, params: Params) -> Any:
        return analytics.stage_by_rep_heatmap(self._store)

    def _sales_cycle_by_rep(self, params: Params) -> Any:
        return analytics.sales_cycle_by_rep(
            self._store,
            min_deals=clamp_int(params.get("minDeals"), 3, 1, 50),
            limit=clamp_int(params.get("limit"), 12, 3, 50),
        )

    def _segment_stage_industry(self, params: Params) -> Any:
        return analytics.segment_stage_industry(
            self._store,
            segment=parse_text(params.get("segment")),
            top_industries=clamp_int(params.get("topIndustries"), 4, 2, 10),
        )

    def _stale_open_deals(self, params: Params) -> Any:
        return analytics.stale_open_deals(self._store, days=clamp_int(params.get("days"), 30, 1, 365))

    def _latest_activity(self, params: Params) -> Any:
        return analytics.open_deals_latest_activity(self._store)

    def _rep_revenue(self, params: Params) -> Any:
        return analytics.closed_won_revenue_by_rep(self._store, limit=clamp_int(params.get("limit"), 12, 3, 50))
