"""
Risk factors: stale open deals, underperforming reps and low-activity accounts.

"Now" is the end of the current quarter. Activity timestamps are whole days,
so an activity counts as recent when it falls after now - N days.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from sales_insights.config import Thresholds
from sales_insights.models.entities import Deal, iso_or_sentinel
from sales_insights.store.canonical import CanonicalStore

from .periods import Quarter, analysis_now, current_quarter, days_before, round2


@dataclass(frozen=True)
class RiskParams:
    """Window and cutoff parameters shared by risk factors and recommendations."""

    stale_no_activity_days: int = 14
    stale_min_age_days: int = 30
    low_activity_window_days: int = 30
    low_activity_max_count: int = 1
    limit: int = 10


@dataclass
class RepQuarterStats:
    won: int = 0
    lost: int = 0
    won_revenue: float = 0.0
    pipeline_open: float = 0.0

    @property
    def closed(self) -> int:
        return self.won + self.lost

    @property
    def win_rate_pct(self) -> Optional[float]:
        return None if self.closed == 0 else self.won / self.closed * 100


@dataclass
class AccountActivity:
    count: int = 0
    last: Optional[date] = None


@dataclass
class OpenPipeline:
    count: int = 0
    amount: float = 0.0


@dataclass
class ActivitySignals:
    """Per-deal last activity (any time) and per-account activity inside the lookback window."""

    last_by_deal: dict[str, date] = field(default_factory=dict)
    by_account: dict[str, AccountActivity] = field(default_factory=dict)


def activity_signals(store: CanonicalStore, now: date, window_days: int) -> ActivitySignals:
    """Activities without a valid timestamp are ignored; window membership is now-N < ts <= now."""
    signals = ActivitySignals()
    window_start = days_before(now, window_days)
    for act in store.activities:
        ts = act.timestamp
        if ts is None:
            continue
        prev = signals.last_by_deal.get(act.deal_id)
        if prev is None or ts > prev:
            signals.last_by_deal[act.deal_id] = ts

        if window_start < ts <= now:
            deal = store.deals_by_id.get(act.deal_id)
            if deal is None:
                continue
            stats = signals.by_account.setdefault(deal.account_id, AccountActivity())
            stats.count += 1
            if stats.last is None or ts > stats.last:
                stats.last = ts
    return signals


def is_inactive(last_activity: Optional[date], now: date, no_activity_days: int) -> bool:
    """No activity ever, or none after now - no_activity_days."""
    return last_activity is None or last_activity <= days_before(now, no_activity_days)


def is_stale(deal: Deal, last_activity: Optional[date], now: date, params: RiskParams) -> bool:
    """Open, at least stale_min_age_days old and inactive. Undated deals count as very old."""
    if not deal.is_open:
        return False
    if deal.created_or_sentinel > days_before(now, params.stale_min_age_days):
        return False
    return is_inactive(last_activity, now, params.stale_no_activity_days)


def rep_quarter_stats(store: CanonicalStore, quarter: Quarter) -> dict[str, RepQuarterStats]:
    """Won/lost counts and revenue for deals closed in the quarter, plus open pipeline, per rep id."""
    stats = {rep.rep_id: RepQuarterStats() for rep in store.reps}
    for deal in store.deals:
        s = stats.setdefault(deal.rep_id, RepQuarterStats())
        if deal.is_open:
            s.pipeline_open += deal.amount_or_zero
        elif quarter.contains(deal.closed_at):
            if deal.is_won:
                s.won += 1
                s.won_revenue += deal.amount_or_zero
            else:
                s.lost += 1
    return stats


def open_pipeline_by_account(store: CanonicalStore) -> dict[str, OpenPipeline]:
    pipeline: dict[str, OpenPipeline] = {}
    for deal in store.deals:
        if deal.is_open:
            p = pipeline.setdefault(deal.account_id, OpenPipeline())
            p.count += 1
            p.amount += deal.amount_or_zero
    return pipeline


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def stale_deals(store: CanonicalStore, signals: ActivitySignals, now: date, params: RiskParams) -> list[dict]:
    rows = []
    for deal in store.deals:
        last = signals.last_by_deal.get(deal.deal_id)
        if not is_stale(deal, last, now, params):
            continue
        rows.append(
            {
                "dealId": deal.deal_id,
                "accountId": deal.account_id,
                "accountName": store.account_name(deal.account_id),
                "repId": deal.rep_id,
                "repName": store.rep_name(deal.rep_id),
                "stage": deal.stage,
                "amount": deal.amount,
                "createdAt": iso_or_sentinel(deal.created_at),
                "lastActivityAt": _iso(last),
                "daysSinceLastActivity": (now - last).days if last else None,
                "daysOpen": (now - deal.created_or_sentinel).days,
            }
        )
    # Never-touched first, then longest since last activity, then largest amount
    rows.sort(
        key=lambda r: (
            r["daysSinceLastActivity"] is not None,
            -(r["daysSinceLastActivity"] if r["daysSinceLastActivity"] is not None else -1),
            -(r["amount"] or 0),
        )
    )
    return rows


def underperforming_reps(
    store: CanonicalStore, quarter: Quarter, thresholds: Thresholds
) -> list[dict]:
    """
    Reps with enough closed deals in the quarter and a low win rate,
    or no won revenue while still holding open pipeline.
    """
    stats = rep_quarter_stats(store, quarter)
    max_pct = thresholds.underperforming_max_win_rate * 100
    rows = []
    for rep in store.reps:
        s = stats[rep.rep_id]
        win_pct = s.win_rate_pct
        row = {
            "repId": rep.rep_id,
            "repName": rep.name,
            "winRatePct": round2(win_pct) if win_pct is not None else None,
            "closedWonCount": s.won,
            "closedLostCount": s.lost,
            "closedWonRevenue": round2(s.won_revenue),
            "pipelineOpenAmount": round2(s.pipeline_open),
        }
        low_win_rate = (
            s.closed >= thresholds.underperforming_min_closed
            and (row["winRatePct"] if row["winRatePct"] is not None else 100) < max_pct
        )
        stuck = row["closedWonRevenue"] == 0 and row["pipelineOpenAmount"] > 0
        if low_win_rate or stuck:
            rows.append(row)
    rows.sort(key=lambda r: (r["winRatePct"] if r["winRatePct"] is not None else 101, r["closedWonRevenue"]))
    return rows


def low_activity_accounts(store: CanonicalStore, signals: ActivitySignals, params: RiskParams) -> list[dict]:
    pipeline = open_pipeline_by_account(store)
    rows = []
    for account in store.accounts:
        activity = signals.by_account.get(account.account_id, AccountActivity())
        if activity.count > params.low_activity_max_count:
            continue
        open_deals = pipeline.get(account.account_id, OpenPipeline())
        rows.append(
            {
                "accountId": account.account_id,
                "accountName": account.name,
                "industry": account.industry_label,
                "segment": account.segment_label,
                "activitiesLastNDays": activity.count,
                "lastActivityAt": _iso(activity.last),
                "openDealsCount": open_deals.count,
                "openDealsAmount": round2(open_deals.amount),
            }
        )
    rows.sort(key=lambda r: (-r["openDealsCount"], r["activitiesLastNDays"], -r["openDealsAmount"]))
    return rows


def _section(rows: list[dict], limit: int) -> dict[str, Any]:
    return {"count": len(rows), "top": rows[:limit]}


def risk_factors(
    store: CanonicalStore,
    params: Optional[RiskParams] = None,
    thresholds: Optional[Thresholds] = None,
) -> dict[str, Any]:
    """Three independent risk views for the current quarter; each section is {count, top}."""
    params = params or RiskParams()
    thresholds = thresholds or Thresholds()
    quarter = current_quarter(store)
    now = analysis_now(store)
    signals = activity_signals(store, now, params.low_activity_window_days)

    return {
        "currentQuarter": quarter.label,
        "period": quarter.period(),
        "parameters": {
            "staleNoActivityDays": params.stale_no_activity_days,
            "staleMinAgeDays": params.stale_min_age_days,
            "lowActivityWindowDays": params.low_activity_window_days,
            "lowActivityMaxCount": params.low_activity_max_count,
            "limit": params.limit,
            "analysisNow": now.isoformat(),
        },
        "staleDeals": _section(stale_deals(store, signals, now, params), params.limit),
        "underperformingReps": _section(underperforming_reps(store, quarter, thresholds), params.limit),
        "lowActivityAccounts": _section(low_activity_accounts(store, signals, params), params.limit),
    }
