"""Canonical CRM entities produced by the cleaning pipeline."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

PROSPECTING = "Prospecting"
NEGOTIATION = "Negotiation"
CLOSED_WON = "Closed Won"
CLOSED_LOST = "Closed Lost"

CLOSED_STAGES = frozenset({CLOSED_WON, CLOSED_LOST})

# Higher wins when collapsing several records of one deal; unknown stages rank 0.
STAGE_PRIORITY: dict[str, int] = {
    PROSPECTING: 1,
    NEGOTIATION: 2,
    CLOSED_LOST: 3,
    CLOSED_WON: 4,
}

UNKNOWN_LABEL = "Unknown"

# Rendered in place of an unparseable date; age-based rules treat it as "very old".
EPOCH_SENTINEL = date(1970, 1, 1)


class _Entity(BaseModel):
    model_config = ConfigDict(frozen=True)


class Account(_Entity):
    """Customer account."""

    account_id: str
    name: str
    industry: Optional[str] = None
    segment: Optional[str] = None

    @property
    def industry_label(self) -> str:
        return self.industry or UNKNOWN_LABEL

    @property
    def segment_label(self) -> str:
        return self.segment or UNKNOWN_LABEL


class Rep(_Entity):
    """Sales representative."""

    rep_id: str
    name: str


class Target(_Entity):
    """Monthly revenue target."""

    month: str = Field(..., description="YYYY-MM")
    target: float


class Deal(_Entity):
    """
    One deal snapshot.
    created_at/closed_at are None when the source value was not a valid ISO date
    (closed_at is also None when it preceded created_at).
    """

    deal_id: str
    account_id: str
    rep_id: str
    stage: str
    amount: Optional[float] = Field(default=None, ge=0)
    created_at: Optional[date] = None
    closed_at: Optional[date] = None

    @property
    def is_won(self) -> bool:
        return self.stage == CLOSED_WON

    @property
    def is_lost(self) -> bool:
        return self.stage == CLOSED_LOST

    @property
    def is_closed(self) -> bool:
        return self.stage in CLOSED_STAGES

    @property
    def is_open(self) -> bool:
        return self.stage not in CLOSED_STAGES

    @property
    def priority(self) -> int:
        return STAGE_PRIORITY.get(self.stage, 0)

    @property
    def created_or_sentinel(self) -> date:
        return self.created_at or EPOCH_SENTINEL

    @property
    def created_month(self) -> Optional[str]:
        return month_key(self.created_at)

    @property
    def closed_month(self) -> Optional[str]:
        return month_key(self.closed_at)

    @property
    def amount_or_zero(self) -> float:
        return self.amount if self.amount is not None else 0.0


class Activity(_Entity):
    """Sales activity (call, email, demo, ...) logged against a deal."""

    activity_id: str
    deal_id: str
    type: str = "unknown"
    timestamp: Optional[date] = None


def month_key(value: Optional[date]) -> Optional[str]:
    """YYYY-MM key (first 7 chars of the ISO date), or None."""
    if value is None:
        return None
    return value.isoformat()[:7]


def iso_or_sentinel(value: Optional[date]) -> str:
    """ISO date for output; the epoch sentinel stands in for a missing date."""
    return (value or EPOCH_SENTINEL).isoformat()
