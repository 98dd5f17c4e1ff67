"""Query surface over the aggregation engine."""

from .params import clamp_int, parse_month, parse_text
from .service import QueryService

__all__ = ["QueryService", "clamp_int", "parse_month", "parse_text"]
