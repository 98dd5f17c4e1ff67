"""Monthly time series over a fixed window; every month in the window gets a point."""

from typing import Any, Optional

from sales_insights.models.entities import Deal
from sales_insights.store.canonical import CanonicalStore

from .grouping import collect_by, count_by, sum_by
from .periods import cycle_days, month_window, round2, win_rate

Point = dict[str, Any]


def _points(keys: list[str], values: dict[str, float]) -> list[Point]:
    return [{"month": month, "value": round2(values.get(month, 0.0))} for month in keys]


def pipeline_by_month(store: CanonicalStore, end_month: str, months: int) -> list[Point]:
    """Sum of amounts of open deals, by created month."""
    keys = month_window(end_month, months)
    sums = sum_by(
        store.deals,
        key=lambda d: d.created_month,
        value=lambda d: d.amount_or_zero,
        predicate=lambda d: d.is_open,
        keys=keys,
    )
    return _points(keys, sums)


def win_rate_by_month(store: CanonicalStore, end_month: str, months: int) -> list[Point]:
    """Won / (won + lost) by closed month, as a 0..1 fraction."""
    keys = month_window(end_month, months)
    won = count_by(store.deals, key=lambda d: d.closed_month, predicate=lambda d: d.is_won, keys=keys)
    lost = count_by(store.deals, key=lambda d: d.closed_month, predicate=lambda d: d.is_lost, keys=keys)
    return [{"month": m, "value": win_rate(won[m], lost[m])} for m in keys]


def _cycle(d: Deal) -> Optional[int]:
    return cycle_days(d.created_at, d.closed_at)


def sales_cycle_by_month(store: CanonicalStore, end_month: str, months: int) -> list[Point]:
    """Mean days from creation to close for closed deals, by closed month."""
    keys = month_window(end_month, months)
    cycles = collect_by(
        store.deals,
        key=lambda d: d.closed_month,
        value=_cycle,
        predicate=lambda d: d.is_closed,
        keys=keys,
    )
    return [
        {"month": m, "value": round2(sum(cycles[m]) / len(cycles[m])) if cycles[m] else 0.0}
        for m in keys
    ]


def avg_deal_size_by_month(store: CanonicalStore, end_month: str, months: int) -> list[Point]:
    """Mean of positive amounts, by created month."""
    keys = month_window(end_month, months)
    amounts = collect_by(
        store.deals,
        key=lambda d: d.created_month,
        value=lambda d: d.amount,
        predicate=lambda d: d.amount is not None and d.amount > 0,
        keys=keys,
    )
    return [
        {"month": m, "value": round2(sum(amounts[m]) / len(amounts[m])) if amounts[m] else 0.0}
        for m in keys
    ]


def revenue_by_month(store: CanonicalStore, end_month: str, months: int) -> list[Point]:
    """Closed Won amounts, by closed month."""
    keys = month_window(end_month, months)
    sums = sum_by(
        store.deals,
        key=lambda d: d.closed_month,
        value=lambda d: d.amount_or_zero,
        predicate=lambda d: d.is_won,
        keys=keys,
    )
    return _points(keys, sums)
