"""Tests for raw record loaders."""

import json
from pathlib import Path

import httpx
import pytest

from sales_insights.errors import LoaderError
from sales_insights.loaders import LOADERS, CsvDirectoryLoader, HttpJsonLoader, JsonDirectoryLoader, get_loader


def _mock_client(collections: dict[str, object], status: int = 200) -> httpx.Client:
    """httpx client that serves /data/<name>.json from a dict."""

    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1].removesuffix(".json")
        if name not in collections:
            return httpx.Response(404, text="not found")
        return httpx.Response(status, json=collections[name])

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestJsonDirectoryLoader:
    """Tests for JsonDirectoryLoader."""

    def test_load_all_collections(self, sample_data_dir: Path) -> None:
        dataset = JsonDirectoryLoader(sample_data_dir).load()
        assert dataset.counts() == {"accounts": 4, "reps": 3, "targets": 3, "deals": 7, "activities": 4}
        assert dataset.deals[0].get("deal_id") == "d1"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(LoaderError, match="Cannot read"):
            JsonDirectoryLoader(tmp_path).load()

    def test_invalid_json_raises(self, sample_data_dir: Path) -> None:
        (sample_data_dir / "deals.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(LoaderError, match="Invalid JSON"):
            JsonDirectoryLoader(sample_data_dir).load()

    def test_undecodable_file_raises(self, sample_data_dir: Path) -> None:
        (sample_data_dir / "deals.json").write_bytes(b"[\xff\xfe]")
        with pytest.raises(LoaderError, match="Cannot read"):
            JsonDirectoryLoader(sample_data_dir).load_collection("deals")

    def test_non_array_raises(self, sample_data_dir: Path) -> None:
        (sample_data_dir / "reps.json").write_text(json.dumps({"rep_id": "r1"}), encoding="utf-8")
        with pytest.raises(LoaderError, match="JSON array"):
            JsonDirectoryLoader(sample_data_dir).load_collection("reps")

    def test_unknown_collection(self, sample_data_dir: Path) -> None:
        with pytest.raises(ValueError, match="Unknown collection"):
            JsonDirectoryLoader(sample_data_dir).load_collection("leads")


class TestCsvDirectoryLoader:
    def test_empty_cells_become_none(self, tmp_path: Path) -> None:
        (tmp_path / "deals.csv").write_text(
            "deal_id,account_id,rep_id,stage,amount,created_at,closed_at\n"
            'd1,a1,r1,"Closed Won",1200,2025-01-05,2025-02-01\n'
            "d2,a1,r1,Prospecting,,2025-01-06,\n",
            encoding="utf-8",
        )
        rows = CsvDirectoryLoader(tmp_path).load_collection("deals")
        assert rows[0].get("stage") == "Closed Won"
        assert rows[0].get("amount") == "1200"
        assert rows[1].get("amount") is None
        assert rows[1].get("closed_at") is None

    def test_undecodable_file_raises(self, tmp_path: Path) -> None:
        (tmp_path / "reps.csv").write_bytes(b"rep_id,name\n\xffr1,Alice\n")
        with pytest.raises(LoaderError, match="Cannot read"):
            CsvDirectoryLoader(tmp_path).load_collection("reps")

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(LoaderError):
            CsvDirectoryLoader(tmp_path).load_collection("accounts")


class TestHttpJsonLoader:
    """Tests for HttpJsonLoader using httpx.MockTransport."""

    def test_load(self, sample_rows: dict) -> None:
        loader = HttpJsonLoader("https://crm.example.com/data/", client=_mock_client(sample_rows))
        dataset = loader.load()
        assert dataset.counts()["deals"] == 7

    def test_http_error_raises(self, sample_rows: dict) -> None:
        sample_rows.pop("targets")
        loader = HttpJsonLoader("https://crm.example.com/data", client=_mock_client(sample_rows))
        with pytest.raises(LoaderError, match="HTTP 404"):
            loader.load()

    def test_non_list_payload_raises(self) -> None:
        loader = HttpJsonLoader("https://crm.example.com/data", client=_mock_client({"reps": {"oops": 1}}))
        with pytest.raises(LoaderError, match="JSON array"):
            loader.load_collection("reps")

    def test_connection_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        with pytest.raises(LoaderError, match="Request failed"):
            HttpJsonLoader("https://crm.example.com", client=client).load_collection("deals")

    def test_base_url_required(self) -> None:
        with pytest.raises(ValueError):
            HttpJsonLoader("")


class TestGetLoader:
    """Tests for get_loader."""

    def test_get_json(self, sample_data_dir: Path) -> None:
        loader = get_loader("json", data_dir=sample_data_dir)
        assert loader.source_id == "json"

    def test_get_case_insensitive(self, tmp_path: Path) -> None:
        assert get_loader(" CSV ", data_dir=tmp_path).source_id == "csv"

    def test_unknown_source_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown source: parquet"):
            get_loader("parquet")

    def test_available_sources(self) -> None:
        assert list(LOADERS) == ["json", "csv", "http"]
