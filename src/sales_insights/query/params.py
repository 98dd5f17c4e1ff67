"""Lenient query-parameter parsing: bad input falls back to a default, never raises."""

import math
import re
from typing import Any

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def clamp_int(value: Any, default: int, minimum: int, maximum: int) -> int:
    """
    Numeric strings and numbers are truncated toward zero and clamped to [minimum, maximum].
    Anything else (including bools, NaN and infinities) yields default unchanged.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            n = float(value.strip())
        except ValueError:
            return default
    elif isinstance(value, (int, float)):
        n = float(value)
    else:
        return default
    if not math.isfinite(n):
        return default
    return min(maximum, max(minimum, math.trunc(n)))


def parse_month(value: Any, default: str) -> str:
    """A YYYY-MM key (month 01-12), else default."""
    if isinstance(value, str) and _MONTH_RE.match(value.strip()):
        return value.strip()
    return default


def parse_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""
