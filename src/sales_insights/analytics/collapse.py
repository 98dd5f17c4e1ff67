"""Collapse several stage snapshots of one deal into its current state."""

from typing import Iterable

from sales_insights.models.entities import Deal


def _beats(candidate: Deal, best: Deal) -> bool:
    if candidate.priority != best.priority:
        return candidate.priority > best.priority
    return candidate.closed_at is not None and best.closed_at is None


def collapse_deals(deals: Iterable[Deal]) -> list[Deal]:
    """
    One record per deal_id: the highest stage priority wins; on equal priority
    a record with closed_at beats one without; otherwise the first record stays.
    Output order follows first appearance of each deal_id.
    """
    best: dict[str, Deal] = {}
    for deal in deals:
        current = best.get(deal.deal_id)
        if current is None or _beats(deal, current):
            best[deal.deal_id] = deal
    return list(best.values())
