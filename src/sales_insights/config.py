"""Runtime configuration: where the snapshot comes from and the thresholds behind risk rules."""

import os
from pathlib import Path
from typing import Literal, Optional

try:
    import yaml
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "PyYAML is required for config loading. Run: pip install sales-insights"
    ) from e
from pydantic import BaseModel, Field

SourceId = Literal["json", "csv", "http"]


class Thresholds(BaseModel):
    """Rule thresholds used by risk factors and recommendations."""

    underperforming_min_closed: int = Field(
        default=3,
        ge=1,
        description="Closed deals in quarter needed before a rep's win rate is judged",
    )
    underperforming_max_win_rate: float = Field(
        default=0.30,
        ge=0,
        le=1,
        description="Win rate (0..1) below which a rep is underperforming",
    )
    enterprise_segment_keyword: str = Field(
        default="enterprise",
        description="Case-insensitive substring marking an enterprise segment",
    )
    max_recommendations: int = Field(default=5, ge=1)
    min_recommendations: int = Field(default=3, ge=0)


class AnalyticsConfig(BaseModel):
    """Data source selection plus analytics thresholds."""

    source: SourceId = "json"
    data_dir: Path = Field(default=Path("data"), description="Directory for json/csv sources")
    base_url: Optional[str] = Field(default=None, description="Base URL for the http source")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    thresholds: Thresholds = Field(default_factory=Thresholds)

    def loader_kwargs(self) -> dict:
        """Constructor kwargs for the configured loader."""
        if self.source == "http":
            return {"base_url": self.base_url or "", "timeout": self.timeout}
        return {"data_dir": self.data_dir}

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AnalyticsConfig":
        """Load config from YAML file. Supports nested (source/thresholds) or flat structure."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        source = data.get("source") if isinstance(data.get("source"), dict) else {}
        thresholds = data.get("thresholds", {}) or {}

        def _get(key: str, nested: dict, top: dict, default=None):
            return nested.get(key, top.get(key, default))

        flat: dict = {}
        kind = source.get("type") if source else data.get("source")
        if kind:
            flat["source"] = kind
        for key in ("data_dir", "base_url", "timeout"):
            value = _get(key, source, data)
            if value is not None:
                flat[key] = value
        flat["thresholds"] = {
            key: value
            for key in Thresholds.model_fields
            if (value := _get(key, thresholds, data)) is not None
        }
        return cls.model_validate(flat)

    @classmethod
    def from_env(cls, base: Optional["AnalyticsConfig"] = None) -> "AnalyticsConfig":
        """Overlay SALES_INSIGHTS_* environment variables on base (or the defaults)."""
        config = base or cls()
        updates: dict = {}
        if data_dir := os.environ.get("SALES_INSIGHTS_DATA_DIR"):
            updates["data_dir"] = data_dir
        if source := os.environ.get("SALES_INSIGHTS_SOURCE"):
            updates["source"] = source.strip().lower()
        if base_url := os.environ.get("SALES_INSIGHTS_BASE_URL"):
            updates["base_url"] = base_url
        if not updates:
            return config
        return cls.model_validate({**config.model_dump(), **updates})
