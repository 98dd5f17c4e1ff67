"""Data models for raw and cleaned CRM records."""

from sales_insights.models.entities import Account, Activity, Deal, Rep, Target
from sales_insights.models.raw import RawDataset, RawRecord

__all__ = ["Account", "Activity", "Deal", "RawDataset", "RawRecord", "Rep", "Target"]
