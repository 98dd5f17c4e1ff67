"""Chart-ready aggregations: stage counts, cross-tabs, rep leaderboards and pies."""

from typing import Any, Optional

from sales_insights.models.entities import (
    CLOSED_LOST,
    CLOSED_WON,
    NEGOTIATION,
    PROSPECTING,
    UNKNOWN_LABEL,
    Activity,
    Deal,
)
from sales_insights.store.canonical import CanonicalStore

from .collapse import collapse_deals
from .grouping import collect_by, count_by, sum_by
from .periods import analysis_now, cycle_days, days_before, round2

# Display order for the stage bar chart
STAGE_DISPLAY_ORDER = [CLOSED_WON, CLOSED_LOST, NEGOTIATION, PROSPECTING]
# Funnel order for heatmap columns
STAGE_FUNNEL_ORDER = [PROSPECTING, NEGOTIATION, CLOSED_LOST, CLOSED_WON]
OTHER_STAGE = "Other"
OTHERS_LABEL = "Others"

LATEST_ACTIVITY_TYPES = ("call", "email", "demo")


def stage_label(deal: Deal) -> str:
    return deal.stage.strip() or UNKNOWN_LABEL


def rep_label(store: CanonicalStore, rep_id: str) -> str:
    return store.rep_name(rep_id) or UNKNOWN_LABEL


def deals_by_stage(store: CanonicalStore) -> dict[str, Any]:
    """
    Count collapsed deals per stage in display order.
    Non-canonical stages are grouped into an "Other" row (only when present)
    so the counts always add up to totalUniqueDeals.
    """
    collapsed = collapse_deals(store.deals)
    counts = count_by(collapsed, key=stage_label)

    chart_data = [{"stage": stage, "count": counts.get(stage, 0)} for stage in STAGE_DISPLAY_ORDER]
    other = sum(c for stage, c in counts.items() if stage not in STAGE_DISPLAY_ORDER)
    if other:
        chart_data.append({"stage": OTHER_STAGE, "count": other})

    return {
        "chartData": chart_data,
        "totalUniqueDeals": len(collapsed),
        "total": sum(row["count"] for row in chart_data),
    }


def stage_by_rep_heatmap(store: CanonicalStore) -> dict[str, Any]:
    """Deal counts per (rep, stage); deals whose rep does not resolve are left out."""
    reps = sorted(r.name for r in store.reps)
    counts = count_by(
        store.deals,
        key=lambda d: (store.rep_name(d.rep_id), stage_label(d)) if d.rep_id in store.reps_by_id else None,
    )
    cells = [
        {"rep": rep, "stage": stage, "count": counts.get((rep, stage), 0)}
        for rep in reps
        for stage in STAGE_FUNNEL_ORDER
    ]
    return {"reps": reps, "stages": list(STAGE_FUNNEL_ORDER), "cells": cells}


def segment_stage_industry(store: CanonicalStore, segment: str = "", top_industries: int = 4) -> dict[str, Any]:
    """
    Stage x industry deal counts within one account segment.
    segment defaults to the alphabetically first segment; industries are the
    top_industries most frequent in that segment. Deals without an account are left out.
    """
    joined = [
        (stage_label(d), account.segment_label, account.industry_label)
        for d in store.deals
        if (account := store.accounts_by_id.get(d.account_id)) is not None
    ]

    segments = sorted({seg for _, seg, _ in joined})
    chosen = segment or (segments[0] if segments else UNKNOWN_LABEL)
    rows = [(stage, industry) for stage, seg, industry in joined if seg == chosen]

    stages = sorted({stage for stage, _ in rows})
    industry_counts = count_by(rows, key=lambda r: r[1])
    industries = [
        name for name, _ in sorted(industry_counts.items(), key=lambda kv: kv[1], reverse=True)[:top_industries]
    ]

    counts = count_by(rows, key=lambda r: r if r[1] in industries else None)
    series = [
        {
            "stage": stage,
            "values": [{"industry": ind, "count": counts.get((stage, ind), 0)} for ind in industries],
        }
        for stage in stages
    ]
    return {
        "segment": chosen,
        "segments": segments,
        "stages": stages,
        "industries": industries,
        "series": series,
    }


def closed_won_revenue_by_rep(store: CanonicalStore, limit: int = 12) -> dict[str, Any]:
    """Closed Won revenue per rep name, highest first."""
    sums = sum_by(
        store.deals,
        key=lambda d: rep_label(store, d.rep_id),
        value=lambda d: d.amount if d.amount and d.amount > 0 else 0.0,
        predicate=lambda d: d.is_won,
    )
    rows = sorted(
        ({"rep": rep, "amount": round2(amount)} for rep, amount in sums.items()),
        key=lambda r: r["amount"],
        reverse=True,
    )
    return {"rows": rows[:limit], "limit": limit}


def top_with_others(counts: dict[str, int], top: int) -> list[dict[str, Any]]:
    """Sorted desc, truncated to top, with an "Others" item summing the rest (only if non-zero)."""
    rows = sorted(({"rep": k, "value": v} for k, v in counts.items()), key=lambda r: r["value"], reverse=True)
    others = sum(r["value"] for r in rows[top:])
    items = rows[:top]
    if others > 0:
        items.append({"rep": OTHERS_LABEL, "value": others})
    return items


def _outcome_pie(store: CanonicalStore, stage: str, top: int, total_key: str) -> dict[str, Any]:
    counts = count_by(
        collapse_deals(store.deals),
        key=lambda d: rep_label(store, d.rep_id),
        predicate=lambda d: d.stage == stage,
    )
    return {
        "items": top_with_others(counts, top),
        "meta": {"topN": top, total_key: sum(counts.values())},
    }


def closed_won_pie(store: CanonicalStore, top: int = 8) -> dict[str, Any]:
    return _outcome_pie(store, CLOSED_WON, top, "totalClosedWon")


def closed_lost_pie(store: CanonicalStore, top: int = 8) -> dict[str, Any]:
    return _outcome_pie(store, CLOSED_LOST, top, "totalClosedLost")


def sales_cycle_by_rep(store: CanonicalStore, min_deals: int = 3, limit: int = 12) -> dict[str, Any]:
    """Average days to close per rep, for reps with at least min_deals closed deals; longest first."""
    cycles = collect_by(
        store.deals,
        key=lambda d: rep_label(store, d.rep_id),
        value=lambda d: cycle_days(d.created_at, d.closed_at),
        predicate=lambda d: d.is_closed,
    )
    rows = [
        {"rep": rep, "avgDays": round2(sum(days) / len(days)), "deals": len(days)}
        for rep, days in cycles.items()
        if len(days) >= min_deals and days
    ]
    rows.sort(key=lambda r: r["avgDays"], reverse=True)
    return {"rows": rows[:limit], "minDeals": min_deals, "limit": limit}


def stale_open_deals(store: CanonicalStore, days: int = 30) -> dict[str, Any]:
    """Open Prospecting/Negotiation deals created more than `days` before the analysis date."""
    cutoff = days_before(analysis_now(store), days)
    counts = count_by(
        store.deals,
        key=stage_label,
        predicate=lambda d: d.stage in (PROSPECTING, NEGOTIATION) and d.created_or_sentinel <= cutoff,
    )
    rows = [{"stage": stage, "count": counts.get(stage, 0)} for stage in (PROSPECTING, NEGOTIATION)]
    return {"days": days, "asOf": analysis_now(store).isoformat(), "rows": rows}


def open_deals_latest_activity(store: CanonicalStore) -> dict[str, Any]:
    """How many open deals have a call, email or demo as their most recent activity."""
    latest_types: list[str] = []
    for deal in store.deals:
        if not deal.is_open:
            continue
        latest: Optional[Activity] = None
        for act in store.activities_by_deal_id.get(deal.deal_id, ()):
            if act.timestamp is None:
                continue
            if latest is None or act.timestamp > latest.timestamp:
                latest = act
        if latest is not None:
            latest_types.append(latest.type)

    counts = count_by(latest_types, key=lambda t: t, predicate=lambda t: t in LATEST_ACTIVITY_TYPES)
    rows = sorted(({"type": t, "count": c} for t, c in counts.items()), key=lambda r: r["count"], reverse=True)
    return {"rows": rows}
