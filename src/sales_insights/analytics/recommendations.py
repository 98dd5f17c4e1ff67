"""Prioritized action items derived from the same signals as risk factors."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from sales_insights.config import Thresholds
from sales_insights.models.entities import NEGOTIATION, UNKNOWN_LABEL
from sales_insights.store.canonical import CanonicalStore

from .periods import Quarter, analysis_now, current_quarter, round2
from .risk import (
    ActivitySignals,
    RiskParams,
    activity_signals,
    is_inactive,
    is_stale,
    open_pipeline_by_account,
    rep_quarter_stats,
)


class MetricHint(BaseModel):
    key: str
    value: Optional[float | str] = None


class Recommendation(BaseModel):
    id: str
    title: str
    message: str
    why: str
    impact: str  # "high" | "medium" | "low"
    metric_hint: Optional[MetricHint] = Field(default=None, serialization_alias="metricHint")
    filters: dict[str, str | int] = {}

    def as_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def enterprise_stale(
    store: CanonicalStore, signals: ActivitySignals, params: RiskParams, keyword: str
) -> Optional[Recommendation]:
    now = analysis_now(store)
    count = 0
    amount = 0.0
    for deal in store.deals:
        account = store.accounts_by_id.get(deal.account_id)
        if account is None or keyword.lower() not in (account.segment or "").lower():
            continue
        if is_stale(deal, signals.last_by_deal.get(deal.deal_id), now, params):
            count += 1
            amount += deal.amount_or_zero
    if count == 0:
        return None
    return Recommendation(
        id="rec_enterprise_stale",
        title=f"Focus on Enterprise deals older than {params.stale_min_age_days} days",
        message=(
            f"You have {count} Enterprise open deals with no activity "
            f"in the last {params.stale_no_activity_days} days."
        ),
        why="Enterprise deals usually carry higher ACV, so unsticking a few can move the quarter.",
        impact="high",
        metric_hint=MetricHint(key="enterpriseStalePipeline", value=round2(amount)),
        filters={
            "segment": "Enterprise",
            "minAgeDays": params.stale_min_age_days,
            "noActivityDays": params.stale_no_activity_days,
        },
    )


def coach_rep(store: CanonicalStore, quarter: Quarter, thresholds: Thresholds) -> Optional[Recommendation]:
    """Lowest in-quarter win rate among reps with enough closed deals; ties keep the first rep."""
    worst_id: Optional[str] = None
    worst_rate: Optional[float] = None
    worst_closed = 0
    for rep_id, s in rep_quarter_stats(store, quarter).items():
        if s.closed < thresholds.underperforming_min_closed:
            continue
        rate = s.win_rate_pct
        if worst_rate is None or rate < worst_rate:
            worst_id, worst_rate, worst_closed = rep_id, rate, s.closed

    rep = store.reps_by_id.get(worst_id) if worst_id else None
    if rep is None or worst_rate is None:
        return None
    return Recommendation(
        id="rec_coach_rep",
        title=f"Coach {rep.name} on win rate",
        message=(
            f"{rep.name} has the lowest win rate in the current quarter ({round2(worst_rate)}%) "
            f"across reps with ≥{thresholds.underperforming_min_closed} closed deals ({worst_closed} closed)."
        ),
        why="Small improvements in qualification/objection handling can increase conversion quickly.",
        impact="high",
        metric_hint=MetricHint(key="repWinRatePct", value=round2(worst_rate)),
        filters={"repId": rep.rep_id, "quarter": quarter.label},
    )


def quiet_segment(store: CanonicalStore, signals: ActivitySignals, params: RiskParams) -> Optional[Recommendation]:
    """Segment with the fewest in-window activities per account among segments holding open pipeline."""
    pipeline = open_pipeline_by_account(store)
    segments: dict[str, list[float]] = {}  # name -> [accounts, activities, open amount]
    for account in store.accounts:
        name = (account.segment or "").strip() or UNKNOWN_LABEL
        s = segments.setdefault(name, [0, 0, 0.0])
        s[0] += 1
        activity = signals.by_account.get(account.account_id)
        s[1] += activity.count if activity else 0
        open_deals = pipeline.get(account.account_id)
        s[2] += open_deals.amount if open_deals else 0.0

    worst: Optional[tuple[str, float, float]] = None
    for name, (accounts, activities, open_amount) in segments.items():
        if accounts == 0 or open_amount <= 0:
            continue
        per_account = activities / accounts
        if worst is None or per_account < worst[1]:
            worst = (name, per_account, open_amount)

    if worst is None:
        return None
    name, per_account, open_amount = worst
    return Recommendation(
        id="rec_increase_activity_segment",
        title=f'Increase activity for segment "{name}"',
        message=(
            f"This segment has the lowest activity rate (~{round2(per_account)} activities/account "
            f"in last {params.low_activity_window_days} days) while still holding open pipeline."
        ),
        why="More touches (calls/emails) usually improves progression and reduces slippage.",
        impact="medium",
        metric_hint=MetricHint(key="segmentOpenPipeline", value=round2(open_amount)),
        filters={"segment": name, "windowDays": params.low_activity_window_days},
    )


def negotiation_stale(store: CanonicalStore, signals: ActivitySignals, params: RiskParams) -> Optional[Recommendation]:
    now = analysis_now(store)
    stalled = [
        d
        for d in store.deals
        if d.stage == NEGOTIATION
        and is_inactive(signals.last_by_deal.get(d.deal_id), now, params.stale_no_activity_days)
    ]
    if not stalled:
        return None
    return Recommendation(
        id="rec_negotiation_stale",
        title="Push stalled Negotiation deals",
        message=(
            f"{len(stalled)} deals in Negotiation have no activity "
            f"in the last {params.stale_no_activity_days} days."
        ),
        why="Negotiation is late-stage; quick follow-ups can unblock procurement/legal and pull revenue forward.",
        impact="medium",
        metric_hint=MetricHint(key="negotiationStaleAmount", value=round2(sum(d.amount_or_zero for d in stalled))),
        filters={"stage": NEGOTIATION, "noActivityDays": params.stale_no_activity_days},
    )


def fallback_recommendations(params: RiskParams) -> list[Recommendation]:
    """Generic low-impact items, in the order they are used to top up a short list."""
    return [
        Recommendation(
            id="rec_general_activity",
            title="Increase touches on open pipeline this week",
            message=(
                f"Prioritize accounts with open deals but ≤{params.low_activity_max_count} activities "
                f"in the last {params.low_activity_window_days} days."
            ),
            why="Consistent weekly activity is the simplest leading indicator to improve pipeline movement.",
            impact="low",
            filters={
                "lowActivityMaxCount": params.low_activity_max_count,
                "windowDays": params.low_activity_window_days,
            },
        ),
        Recommendation(
            id="rec_pipeline_hygiene",
            title="Review stages and close dates on open deals",
            message=(
                f"Confirm the stage of open deals created more than {params.stale_min_age_days} days ago "
                "and close out the ones that are no longer active."
            ),
            why="An accurate pipeline makes forecasts and win rates trustworthy.",
            impact="low",
            filters={"minAgeDays": params.stale_min_age_days},
        ),
        Recommendation(
            id="rec_target_checkin",
            title="Check quarter progress against target",
            message="Compare closed-won revenue with the quarterly target and agree on next steps for the gap.",
            why="A regular gap review keeps the team focused on the deals that can still land this quarter.",
            impact="low",
        ),
    ]


def recommendations(
    store: CanonicalStore,
    params: Optional[RiskParams] = None,
    thresholds: Optional[Thresholds] = None,
) -> dict[str, Any]:
    """
    Signal-based items in priority order (enterprise stale pipeline, worst rep,
    quietest segment, stalled Negotiation), topped up with fallbacks to
    min_recommendations and truncated to max_recommendations.
    """
    params = params or RiskParams()
    thresholds = thresholds or Thresholds()
    quarter = current_quarter(store)
    now = analysis_now(store)
    signals = activity_signals(store, now, params.low_activity_window_days)

    candidates = [
        enterprise_stale(store, signals, params, thresholds.enterprise_segment_keyword),
        coach_rep(store, quarter, thresholds),
        quiet_segment(store, signals, params),
        negotiation_stale(store, signals, params),
    ]
    items = [rec for rec in candidates if rec is not None]
    for fallback in fallback_recommendations(params):
        if len(items) >= thresholds.min_recommendations:
            break
        items.append(fallback)

    return {
        "currentQuarter": quarter.label,
        "period": quarter.period(),
        "parameters": {
            "staleNoActivityDays": params.stale_no_activity_days,
            "staleMinAgeDays": params.stale_min_age_days,
            "lowActivityWindowDays": params.low_activity_window_days,
            "lowActivityMaxCount": params.low_activity_max_count,
            "analysisNow": now.isoformat(),
        },
        "items": [rec.as_payload() for rec in items[: thresholds.max_recommendations]],
    }
