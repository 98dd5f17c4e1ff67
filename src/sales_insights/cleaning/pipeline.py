"""Cleaning pipeline: raw records -> validated, deduplicated, cross-referenced entities."""

import logging
from typing import Callable, Iterable, Optional, TypeVar

from pydantic import BaseModel, Field

from sales_insights.models.entities import Account, Activity, Deal, Rep, Target
from sales_insights.models.raw import RawDataset, RawRecord
from sales_insights.store.canonical import CanonicalStore

from .parsers import (
    clean_activity_type,
    clean_text,
    is_month_key,
    normalize_stage,
    parse_amount,
    parse_iso_date,
    to_number_or_none,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityReport(BaseModel):
    """Survival counts for one collection."""

    raw: int = 0
    kept: int = 0

    @property
    def dropped(self) -> int:
        return self.raw - self.kept


class CleaningReport(BaseModel):
    """How many records of each collection survived cleaning."""

    accounts: EntityReport = Field(default_factory=EntityReport)
    reps: EntityReport = Field(default_factory=EntityReport)
    targets: EntityReport = Field(default_factory=EntityReport)
    deals: EntityReport = Field(default_factory=EntityReport)
    activities: EntityReport = Field(default_factory=EntityReport)

    def as_dict(self) -> dict[str, dict[str, int]]:
        return {
            name: {"raw": rep.raw, "kept": rep.kept, "dropped": rep.dropped}
            for name, rep in (
                ("accounts", self.accounts),
                ("reps", self.reps),
                ("targets", self.targets),
                ("deals", self.deals),
                ("activities", self.activities),
            )
        }


def dedupe_by_id(items: Iterable[T], key: Callable[[T], str]) -> list[T]:
    """Keep the first item per non-empty id, preserving input order."""
    seen: set[str] = set()
    out: list[T] = []
    for item in items:
        item_id = key(item)
        if not item_id or item_id in seen:
            continue
        seen.add(item_id)
        out.append(item)
    return out


def _clean_account(raw: RawRecord) -> Optional[Account]:
    account_id = raw.get("account_id")
    name = clean_text(raw.get("name"))
    if not isinstance(account_id, str) or not name:
        return None
    return Account(
        account_id=account_id,
        name=name,
        industry=clean_text(raw.get("industry")) or None,
        segment=clean_text(raw.get("segment")) or None,
    )


def _clean_rep(raw: RawRecord) -> Optional[Rep]:
    rep_id = raw.get("rep_id")
    name = clean_text(raw.get("name"))
    if not isinstance(rep_id, str) or name is None:
        return None
    return Rep(rep_id=rep_id, name=name)


def _clean_target(raw: RawRecord) -> Optional[Target]:
    month = raw.get("month")
    value = to_number_or_none(raw.get("target"))
    if not is_month_key(month) or value is None:
        return None
    return Target(month=month, target=value)


def _clean_deal(raw: RawRecord) -> Optional[Deal]:
    deal_id = raw.get("deal_id")
    account_id = raw.get("account_id")
    rep_id = raw.get("rep_id")
    if not all(isinstance(v, str) for v in (deal_id, account_id, rep_id)):
        return None

    created_at = parse_iso_date(raw.get("created_at"))
    closed_at = parse_iso_date(raw.get("closed_at"))
    if created_at and closed_at and closed_at < created_at:
        logger.debug("Deal %s closed before it was created; dropping closed_at", deal_id)
        closed_at = None

    return Deal(
        deal_id=deal_id,
        account_id=account_id,
        rep_id=rep_id,
        stage=normalize_stage(raw.get("stage")),
        amount=parse_amount(raw.get("amount")),
        created_at=created_at,
        closed_at=closed_at,
    )


def _clean_activity(raw: RawRecord) -> Optional[Activity]:
    activity_id = raw.get("activity_id")
    deal_id = raw.get("deal_id")
    if not isinstance(activity_id, str) or not isinstance(deal_id, str):
        return None
    return Activity(
        activity_id=activity_id,
        deal_id=deal_id,
        type=clean_activity_type(raw.get("type")),
        timestamp=parse_iso_date(raw.get("timestamp")),
    )


def _apply(raws: list[RawRecord], fn: Callable[[RawRecord], Optional[T]], kind: str) -> list[T]:
    items = []
    for raw in raws:
        item = fn(raw)
        if item is None:
            logger.debug("Dropping malformed %s record: %r", kind, raw.data)
            continue
        items.append(item)
    return items


def _resolved(items: list[T], ok: Callable[[T], bool], kind: str, key: Callable[[T], str]) -> list[T]:
    kept = []
    for item in items:
        if ok(item):
            kept.append(item)
        else:
            logger.debug("Dropping %s %s: unresolved reference", kind, key(item))
    return kept


def clean_accounts(raws: list[RawRecord]) -> list[Account]:
    return dedupe_by_id(_apply(raws, _clean_account, "account"), lambda a: a.account_id)


def clean_reps(raws: list[RawRecord]) -> list[Rep]:
    return dedupe_by_id(_apply(raws, _clean_rep, "rep"), lambda r: r.rep_id)


def clean_targets(raws: list[RawRecord]) -> list[Target]:
    return dedupe_by_id(_apply(raws, _clean_target, "target"), lambda t: t.month)


def clean_deals(
    raws: list[RawRecord],
    account_ids: set[str],
    rep_ids: set[str],
) -> list[Deal]:
    """
    Clean deals, then drop those whose account or rep did not survive cleaning,
    then keep the first record per deal_id.
    """
    resolved = _resolved(
        _apply(raws, _clean_deal, "deal"),
        lambda d: d.account_id in account_ids and d.rep_id in rep_ids,
        "deal",
        lambda d: d.deal_id,
    )
    return dedupe_by_id(resolved, lambda d: d.deal_id)


def clean_activities(raws: list[RawRecord], deal_ids: set[str]) -> list[Activity]:
    resolved = _resolved(
        _apply(raws, _clean_activity, "activity"),
        lambda a: a.deal_id in deal_ids,
        "activity",
        lambda a: a.activity_id,
    )
    return dedupe_by_id(resolved, lambda a: a.activity_id)


def clean_dataset(raw: RawDataset) -> tuple[CanonicalStore, CleaningReport]:
    """
    Run the full cleaning pipeline and index the result.
    Malformed records are dropped; nothing here raises for bad data.
    """
    accounts = clean_accounts(raw.accounts)
    reps = clean_reps(raw.reps)
    targets = clean_targets(raw.targets)
    deals = clean_deals(
        raw.deals,
        account_ids={a.account_id for a in accounts},
        rep_ids={r.rep_id for r in reps},
    )
    activities = clean_activities(raw.activities, deal_ids={d.deal_id for d in deals})

    report = CleaningReport(
        accounts=EntityReport(raw=len(raw.accounts), kept=len(accounts)),
        reps=EntityReport(raw=len(raw.reps), kept=len(reps)),
        targets=EntityReport(raw=len(raw.targets), kept=len(targets)),
        deals=EntityReport(raw=len(raw.deals), kept=len(deals)),
        activities=EntityReport(raw=len(raw.activities), kept=len(activities)),
    )
    logger.info("Cleaning finished: %s", report.as_dict())

    store = CanonicalStore.build(
        accounts=accounts,
        reps=reps,
        targets=targets,
        deals=deals,
        activities=activities,
    )
    return store, report
