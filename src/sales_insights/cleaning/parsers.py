"""Field-level coercion for untrusted CRM values."""

import math
import re
from datetime import date
from typing import Any, Optional

from sales_insights.models.entities import CLOSED_LOST, CLOSED_WON, NEGOTIATION, PROSPECTING, UNKNOWN_LABEL

# Lowercased variant -> canonical stage (checked after trim)
STAGE_SYNONYMS: dict[str, str] = {
    "closed won": CLOSED_WON,
    "won": CLOSED_WON,
    "closed-won": CLOSED_WON,
    "closed lost": CLOSED_LOST,
    "lost": CLOSED_LOST,
    "closed-lost": CLOSED_LOST,
    "prospecting": PROSPECTING,
    "prospect": PROSPECTING,
    "negotiation": NEGOTIATION,
    "negotiating": NEGOTIATION,
}

# YYYY-MM-DD, optionally followed by an ISO time part (only the date is kept)
_ISO_DATE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse an ISO date string. Returns None for non-strings and impossible dates (e.g. 2025-02-30)."""
    if not isinstance(value, str):
        return None
    m = _ISO_DATE.match(value.strip())
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def to_number_or_none(value: Any) -> Optional[float]:
    """Finite number from a number or numeric string; None otherwise. Booleans are not numbers here."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
    elif isinstance(value, str):
        try:
            n = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return n if math.isfinite(n) else None


def normalize_stage(value: Any) -> str:
    """Map stage variants to canonical names; unknown strings pass through unchanged."""
    if not isinstance(value, str):
        return UNKNOWN_LABEL
    return STAGE_SYNONYMS.get(value.strip().lower(), value)


def clean_text(value: Any) -> Optional[str]:
    """Trimmed string, or None for non-strings."""
    if not isinstance(value, str):
        return None
    return value.strip()


def clean_activity_type(value: Any) -> str:
    if not isinstance(value, str):
        return "unknown"
    return value.strip().lower()


def parse_amount(value: Any) -> Optional[float]:
    """Non-negative amount or None. Negative values are discarded, not clamped."""
    amount = to_number_or_none(value)
    if amount is not None and amount < 0:
        return None
    return amount


def is_month_key(value: Any) -> bool:
    """True for a YYYY-MM string with a real month."""
    if not isinstance(value, str) or not re.fullmatch(r"\d{4}-\d{2}", value):
        return False
    return 1 <= int(value[5:7]) <= 12


def format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None
