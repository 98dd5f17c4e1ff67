"""Loader for JSON collections published over HTTP."""

from typing import Any, Optional

import httpx

from sales_insights.errors import LoaderError
from sales_insights.loaders.base import BaseLoader


class HttpJsonLoader(BaseLoader):
    """
    Fetches <base_url>/<collection>.json for each collection.
    Used when the snapshot is served as static files (e.g. an object store or a dashboard's /data folder).
    """

    source_id = "http"

    DEFAULT_HEADERS = {
        "User-Agent": "sales-insights/0.1 (read-only CRM analytics)",
        "Accept": "application/json, */*",
    }

    def __init__(self, base_url: str, client: Optional[httpx.Client] = None, timeout: float = 30.0):
        if not base_url:
            raise ValueError("base_url is required for the http loader")
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers=self.DEFAULT_HEADERS,
        )

    def fetch_collection(self, name: str) -> list[Any]:
        url = f"{self._base_url}/{name}.json"
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise LoaderError(f"HTTP {e.response.status_code} fetching {url}") from e
        except httpx.RequestError as e:
            raise LoaderError(f"Request failed for {url}: {e}") from e
        try:
            rows = response.json()
        except ValueError as e:
            raise LoaderError(f"Invalid JSON from {url}: {e}") from e
        if not isinstance(rows, list):
            raise LoaderError(f"{url} must return a JSON array")
        return rows
