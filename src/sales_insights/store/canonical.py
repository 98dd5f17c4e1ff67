"""In-memory canonical store: the indexed, immutable snapshot every query reads."""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Optional

from sales_insights.models.entities import Account, Activity, Deal, Rep, Target


@dataclass(frozen=True)
class CanonicalStore:
    """
    Cleaned entities plus by-id indices.
    Built once per process from the cleaning pipeline and passed explicitly
    to every aggregation; nothing mutates it afterwards.
    """

    accounts: tuple[Account, ...]
    reps: tuple[Rep, ...]
    targets: tuple[Target, ...]
    deals: tuple[Deal, ...]
    activities: tuple[Activity, ...]

    accounts_by_id: Mapping[str, Account]
    reps_by_id: Mapping[str, Rep]
    deals_by_id: Mapping[str, Deal]
    targets_by_month: Mapping[str, float]
    activities_by_deal_id: Mapping[str, tuple[Activity, ...]]

    @classmethod
    def build(
        cls,
        *,
        accounts: Iterable[Account] = (),
        reps: Iterable[Rep] = (),
        targets: Iterable[Target] = (),
        deals: Iterable[Deal] = (),
        activities: Iterable[Activity] = (),
    ) -> "CanonicalStore":
        """Index already-cleaned entities. Later duplicates in the input do not replace earlier ones."""
        accounts = tuple(accounts)
        reps = tuple(reps)
        targets = tuple(targets)
        deals = tuple(deals)
        activities = tuple(activities)

        grouped: dict[str, list[Activity]] = {}
        for act in activities:
            grouped.setdefault(act.deal_id, []).append(act)

        return cls(
            accounts=accounts,
            reps=reps,
            targets=targets,
            deals=deals,
            activities=activities,
            accounts_by_id=_first_wins_index(accounts, lambda a: a.account_id),
            reps_by_id=_first_wins_index(reps, lambda r: r.rep_id),
            deals_by_id=_first_wins_index(deals, lambda d: d.deal_id),
            targets_by_month=MappingProxyType(
                {t.month: t.target for t in reversed(targets)}
            ),
            activities_by_deal_id=MappingProxyType({k: tuple(v) for k, v in grouped.items()}),
        )

    def latest_target_month(self) -> Optional[str]:
        """Latest YYYY-MM in the targets, or None when there are none."""
        return max(self.targets_by_month, default=None)

    def latest_deal_month(self) -> Optional[str]:
        """Latest created/closed month across deals, or None."""
        months = [m for d in self.deals for m in (d.created_month, d.closed_month) if m]
        return max(months, default=None)

    def rep_name(self, rep_id: str) -> Optional[str]:
        rep = self.reps_by_id.get(rep_id)
        return rep.name if rep else None

    def account_name(self, account_id: str) -> Optional[str]:
        account = self.accounts_by_id.get(account_id)
        return account.name if account else None


def _first_wins_index(items: tuple, key) -> Mapping:
    index: dict = {}
    for item in items:
        index.setdefault(key(item), item)
    return MappingProxyType(index)
