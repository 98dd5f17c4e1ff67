"""Raw CRM records before cleaning."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

COLLECTIONS = ("accounts", "reps", "targets", "deals", "activities")


class RawRecord(BaseModel):
    """
    Flexible raw row from a loader.
    Loaders populate this from JSON objects or CSV rows; nothing is validated yet.
    """

    model_config = ConfigDict(extra="allow")

    data: dict[str, Any] = Field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


class RawDataset(BaseModel):
    """The five record collections exactly as they were loaded."""

    accounts: list[RawRecord] = Field(default_factory=list)
    reps: list[RawRecord] = Field(default_factory=list)
    targets: list[RawRecord] = Field(default_factory=list)
    deals: list[RawRecord] = Field(default_factory=list)
    activities: list[RawRecord] = Field(default_factory=list)

    @classmethod
    def from_rows(cls, **collections: list[Any]) -> "RawDataset":
        """
        Build from plain row lists, e.g. RawDataset.from_rows(deals=[{...}]).
        Non-dict rows are kept as empty records so the cleaner can count them as dropped.
        """
        built: dict[str, list[RawRecord]] = {}
        for name, rows in collections.items():
            if name not in COLLECTIONS:
                raise ValueError(f"Unknown collection: {name}. Expected one of {list(COLLECTIONS)}")
            built[name] = [RawRecord(data=row if isinstance(row, dict) else {}) for row in rows]
        return cls(**built)

    def counts(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in COLLECTIONS}
