"""In-memory storage for the cleaned CRM snapshot."""

from sales_insights.store.canonical import CanonicalStore

__all__ = ["CanonicalStore"]
