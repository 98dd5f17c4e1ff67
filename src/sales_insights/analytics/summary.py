"""Quarter summary: revenue vs target for the dataset's current quarter."""

from typing import Any

from sales_insights.store.canonical import CanonicalStore

from .periods import Quarter, current_quarter, pct_delta, round2


def closed_won_revenue(store: CanonicalStore, quarter: Quarter) -> float:
    """Sum of Closed Won amounts closed inside the quarter (missing amounts count as 0)."""
    return sum(d.amount_or_zero for d in store.deals if d.is_won and quarter.contains(d.closed_at))


def quarter_target(store: CanonicalStore, quarter: Quarter) -> float:
    return sum(store.targets_by_month.get(m, 0.0) for m in quarter.months)


def quarter_summary(store: CanonicalStore) -> dict[str, Any]:
    """
    Revenue, target, gap and QoQ change for the quarter containing the latest target month.
    gapPct is a percentage (None without a target); changePct follows pct_delta, x100.
    """
    quarter = current_quarter(store)
    revenue = closed_won_revenue(store, quarter)
    target = quarter_target(store, quarter)
    gap = revenue - target
    gap_pct = None if target == 0 else round2(gap / target * 100)

    prev_revenue = closed_won_revenue(store, quarter.previous())

    return {
        "currentQuarter": quarter.label,
        "period": quarter.period(),
        "revenue": round2(revenue),
        "target": round2(target),
        "gap": round2(gap),
        "gapPct": gap_pct,
        "change": {
            "type": "QoQ",
            "prevQuarterRevenue": round2(prev_revenue),
            "changePct": round2(pct_delta(revenue, prev_revenue) * 100),
        },
    }
