"""Loaders for a local directory of JSON or CSV exports."""

import csv
import json
from io import StringIO
from pathlib import Path
from typing import Any

from sales_insights.errors import LoaderError
from sales_insights.loaders.base import BaseLoader


class JsonDirectoryLoader(BaseLoader):
    """
    Reads <data_dir>/<collection>.json, each a JSON array of objects.
    """

    source_id = "json"

    def __init__(self, data_dir: str | Path = "data"):
        self._data_dir = Path(data_dir)

    def _path(self, name: str) -> Path:
        return self._data_dir / f"{name}.json"

    def fetch_collection(self, name: str) -> list[Any]:
        path = self._path(name)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LoaderError(f"Cannot read {path}: {e}") from e
        try:
            rows = json.loads(content)
        except json.JSONDecodeError as e:
            raise LoaderError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(rows, list):
            raise LoaderError(f"{path} must contain a JSON array")
        return rows


class CsvDirectoryLoader(BaseLoader):
    """
    Reads <data_dir>/<collection>.csv with a header row.
    Empty cells become None so they clean the same way as missing JSON keys.
    """

    source_id = "csv"

    def __init__(self, data_dir: str | Path = "data"):
        self._data_dir = Path(data_dir)

    def _parse_csv_rows(self, csv_content: str) -> list[dict[str, Any]]:
        """Parse CSV with proper handling of quoted multiline fields."""
        reader = csv.DictReader(StringIO(csv_content))
        return [{k: (v if v != "" else None) for k, v in row.items() if k is not None} for row in reader]

    def fetch_collection(self, name: str) -> list[Any]:
        path = self._data_dir / f"{name}.csv"
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LoaderError(f"Cannot read {path}: {e}") from e
        return self._parse_csv_rows(content)
