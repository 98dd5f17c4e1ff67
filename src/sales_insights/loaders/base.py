"""Abstract base class for raw record loaders."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from sales_insights.errors import LoaderError
from sales_insights.models.raw import COLLECTIONS, RawDataset, RawRecord

logger = logging.getLogger(__name__)


class BaseLoader(ABC):
    """
    Standard interface for reading the five CRM record collections.
    Loaders only fetch and shape rows; all validation belongs to the cleaning pipeline.
    """

    source_id: str = ""

    @abstractmethod
    def fetch_collection(self, name: str) -> list[Any]:
        """
        Return the rows of one collection (accounts, reps, targets, deals, activities).
        Raise LoaderError when the collection is missing or not a list.
        """
        pass

    def load_collection(self, name: str) -> list[RawRecord]:
        """Fetch one collection and wrap each row. Non-object rows become empty records."""
        if name not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {name}. Expected one of {list(COLLECTIONS)}")
        rows = self.fetch_collection(name)
        if not isinstance(rows, list):
            raise LoaderError(f"{self.source_id}: collection '{name}' is not a list")
        return [RawRecord(data=row if isinstance(row, dict) else {}) for row in rows]

    def load(self) -> RawDataset:
        """Load all five collections."""
        dataset = RawDataset(**{name: self.load_collection(name) for name in COLLECTIONS})
        logger.info("Loaded raw records from %s: %s", self.source_id, dataset.counts())
        return dataset
