"""Startup orchestration: load raw collections -> clean -> canonical store."""

import logging
from typing import Optional

from sales_insights.cleaning import CleaningReport, clean_dataset
from sales_insights.config import AnalyticsConfig
from sales_insights.loaders import BaseLoader, get_loader
from sales_insights.store import CanonicalStore

logger = logging.getLogger(__name__)


def load_store(
    config: AnalyticsConfig,
    *,
    loader: Optional[BaseLoader] = None,
) -> tuple[CanonicalStore, CleaningReport]:
    """
    Build the store once for the process.
    Raises LoaderError when a collection cannot be read; bad records inside a
    collection are dropped by cleaning instead.
    """
    loader = loader or get_loader(config.source, **config.loader_kwargs())
    raw = loader.load()
    store, report = clean_dataset(raw)
    logger.info(
        "Store ready: %d deals, %d activities, %d target months",
        len(store.deals),
        len(store.activities),
        len(store.targets_by_month),
    )
    return store, report
