"""Aggregation engine: pure functions from a CanonicalStore (plus parameters) to payloads."""

from sales_insights.analytics.charts import (
    closed_lost_pie,
    closed_won_pie,
    closed_won_revenue_by_rep,
    deals_by_stage,
    open_deals_latest_activity,
    sales_cycle_by_rep,
    segment_stage_industry,
    stage_by_rep_heatmap,
    stale_open_deals,
)
from sales_insights.analytics.collapse import collapse_deals
from sales_insights.analytics.drivers import revenue_drivers
from sales_insights.analytics.grouping import collect_by, count_by, group_reduce, sum_by
from sales_insights.analytics.recommendations import recommendations
from sales_insights.analytics.risk import RiskParams, risk_factors
from sales_insights.analytics.series import (
    avg_deal_size_by_month,
    pipeline_by_month,
    revenue_by_month,
    sales_cycle_by_month,
    win_rate_by_month,
)
from sales_insights.analytics.summary import quarter_summary

__all__ = [
    "RiskParams",
    "avg_deal_size_by_month",
    "closed_lost_pie",
    "closed_won_pie",
    "closed_won_revenue_by_rep",
    "collapse_deals",
    "collect_by",
    "count_by",
    "deals_by_stage",
    "group_reduce",
    "open_deals_latest_activity",
    "pipeline_by_month",
    "quarter_summary",
    "recommendations",
    "revenue_by_month",
    "revenue_drivers",
    "risk_factors",
    "sales_cycle_by_month",
    "sales_cycle_by_rep",
    "segment_stage_industry",
    "stage_by_rep_heatmap",
    "stale_open_deals",
    "sum_by",
    "win_rate_by_month",
]
