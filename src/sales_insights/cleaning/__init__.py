"""Cleaning pipeline for raw CRM records."""

from .pipeline import CleaningReport, clean_dataset, dedupe_by_id

__all__ = ["CleaningReport", "clean_dataset", "dedupe_by_id"]
