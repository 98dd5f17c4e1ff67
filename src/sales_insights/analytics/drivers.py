"""Revenue drivers: latest month vs the month before it, over collapsed deals."""

from typing import Any, Optional

from sales_insights.models.entities import Deal
from sales_insights.store.canonical import CanonicalStore

from .collapse import collapse_deals
from .periods import cycle_days, mean, pct_delta, round2, win_rate


def _positive(amount: Optional[float]) -> float:
    return amount if amount is not None and amount > 0 else 0.0


def pipeline_for_month(deals: list[Deal], month: str) -> float:
    """Open deals created in the month."""
    return sum(_positive(d.amount) for d in deals if d.is_open and d.created_month == month)


def win_rate_for_month(deals: list[Deal], month: str) -> float:
    closed = [d for d in deals if d.is_closed and d.closed_month == month]
    return win_rate(sum(1 for d in closed if d.is_won), sum(1 for d in closed if d.is_lost))


def avg_deal_size_for_month(deals: list[Deal], month: str) -> float:
    amounts = [d.amount for d in deals if d.created_month == month and d.amount is not None and d.amount > 0]
    return mean(amounts) or 0.0


def sales_cycle_for_month(deals: list[Deal], month: str) -> float:
    cycles = [
        c for c in (cycle_days(d.created_at, d.closed_at) for d in deals if d.is_closed and d.closed_month == month)
        if c is not None
    ]
    return mean(cycles) or 0.0


def months_present(deals: list[Deal]) -> list[str]:
    """Sorted union of created and closed month keys."""
    return sorted({m for d in deals for m in (d.created_month, d.closed_month) if m})


def revenue_drivers(store: CanonicalStore) -> dict[str, Any]:
    """
    Pipeline, win rate, average deal size and sales cycle for the latest month present
    in the deals, each with a delta against the previous present month.

    Deltas: pipeline and deal size are fractional (pct_delta); win rate is an absolute
    difference of rates; sales cycle is an absolute difference in days, with
    colorDelta inverted so a longer cycle reads as worse.
    """
    deals = collapse_deals(store.deals)
    months = months_present(deals)
    if not months:
        return {"currentMonth": None, "previousMonth": None, "metrics": None}

    cur = months[-1]
    prev = months[-2] if len(months) > 1 else None

    def _pair(fn):
        return fn(deals, cur), (fn(deals, prev) if prev else 0.0)

    pipeline_cur, pipeline_prev = _pair(pipeline_for_month)
    win_cur, win_prev = _pair(win_rate_for_month)
    avg_cur, avg_prev = _pair(avg_deal_size_for_month)
    cycle_cur, cycle_prev = _pair(sales_cycle_for_month)
    cycle_delta = cycle_cur - cycle_prev

    return {
        "currentMonth": cur,
        "previousMonth": prev,
        "metrics": {
            "pipelineValue": {
                "value": round2(pipeline_cur),
                "previous": round2(pipeline_prev),
                "delta": pct_delta(pipeline_cur, pipeline_prev),
            },
            "winRate": {
                "value": win_cur,
                "previous": win_prev,
                "delta": win_cur - win_prev,
            },
            "avgDealSize": {
                "value": round2(avg_cur),
                "previous": round2(avg_prev),
                "delta": pct_delta(avg_cur, avg_prev),
            },
            "salesCycleDays": {
                "value": round2(cycle_cur),
                "previous": round2(cycle_prev),
                "delta": round2(cycle_delta),
                "colorDelta": round2(-cycle_delta),
            },
        },
    }
