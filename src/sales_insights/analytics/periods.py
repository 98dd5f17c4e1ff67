"""Shared numeric policies and calendar helpers (UTC calendar months and quarters)."""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from sales_insights.errors import EmptyDatasetError
from sales_insights.store.canonical import CanonicalStore


def round2(n: float) -> float:
    """Money and day aggregates are reported to 2 decimal places."""
    return round(float(n), 2) + 0.0  # + 0.0 turns -0.0 into 0.0


def pct_delta(current: float, previous: float) -> float:
    """
    (current - previous) / previous as a fraction.
    previous == 0 is defined as 0 when current is also 0, else 1 (+100%).
    """
    if previous == 0:
        return 0.0 if current == 0 else 1.0
    return (current - previous) / previous


def win_rate(won: int, lost: int) -> float:
    """won / (won + lost); 0 when nothing closed."""
    closed = won + lost
    return won / closed if closed else 0.0


def mean(values: list[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def cycle_days(created_at: Optional[date], closed_at: Optional[date]) -> Optional[int]:
    """Whole days from creation to close; None when either date is missing or close precedes creation."""
    if created_at is None or closed_at is None:
        return None
    days = (closed_at - created_at).days
    return days if days >= 0 else None


def parse_month_key(key: str) -> tuple[int, int]:
    year, month = key.split("-")
    return int(year), int(month)


def format_month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_month(key: str, months: int) -> str:
    """Move a YYYY-MM key by a number of months (negative goes back)."""
    year, month = parse_month_key(key)
    index = year * 12 + (month - 1) + months
    return format_month_key(index // 12, index % 12 + 1)


def month_window(end_month: str, months: int) -> list[str]:
    """The `months` keys ending at end_month, oldest first."""
    return [shift_month(end_month, -offset) for offset in range(months - 1, -1, -1)]


def month_start(key: str) -> date:
    year, month = parse_month_key(key)
    return date(year, month, 1)


def month_end(key: str) -> date:
    year, month = parse_month_key(key)
    return date(year, month, calendar.monthrange(year, month)[1])


@dataclass(frozen=True)
class Quarter:
    """A 3-calendar-month window, inclusive of both boundary dates."""

    year: int
    index: int  # 1..4

    @property
    def start_month(self) -> str:
        return format_month_key(self.year, (self.index - 1) * 3 + 1)

    @property
    def months(self) -> list[str]:
        return [shift_month(self.start_month, i) for i in range(3)]

    @property
    def start(self) -> date:
        return month_start(self.start_month)

    @property
    def end(self) -> date:
        return month_end(self.months[-1])

    @property
    def label(self) -> str:
        return f"Q{self.index} {self.year}"

    def contains(self, d: Optional[date]) -> bool:
        return d is not None and self.start <= d <= self.end

    def previous(self) -> "Quarter":
        if self.index == 1:
            return Quarter(self.year - 1, 4)
        return Quarter(self.year, self.index - 1)

    def period(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def quarter_for_month(key: str) -> Quarter:
    year, month = parse_month_key(key)
    return Quarter(year, (month - 1) // 3 + 1)


def reference_month(store: CanonicalStore) -> str:
    """
    The dataset's "now" month: latest target month, else latest deal month.
    Raises EmptyDatasetError when neither exists.
    """
    month = store.latest_target_month() or store.latest_deal_month()
    if month is None:
        raise EmptyDatasetError("No targets or dated deals to anchor the analysis period")
    return month


def current_quarter(store: CanonicalStore) -> Quarter:
    return quarter_for_month(reference_month(store))


def analysis_now(store: CanonicalStore) -> date:
    """End of the current quarter; the dataset is a fixed history, so wall-clock time is never used."""
    return current_quarter(store).end


def days_before(anchor: date, days: int) -> date:
    return anchor - timedelta(days=days)
