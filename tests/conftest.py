"""Pytest fixtures for sales-insights tests."""

import copy
import json
from pathlib import Path

import pytest

from sales_insights.cleaning import clean_dataset
from sales_insights.models.raw import RawDataset
from sales_insights.store import CanonicalStore

# Q1 2025 snapshot: latest target month 2025-03, so "now" is 2025-03-31.
SAMPLE_ROWS: dict[str, list] = {
    "accounts": [
        {"account_id": "a1", "name": "Acme", "industry": "Tech", "segment": "Enterprise"},
        {"account_id": "a2", "name": "Beta", "industry": "Retail", "segment": "SMB"},
        {"account_id": "a3", "name": "Gamma", "industry": "Finance", "segment": "Enterprise"},
        {"account_id": "a4", "name": "Delta"},
    ],
    "reps": [
        {"rep_id": "r1", "name": "Alice"},
        {"rep_id": "r2", "name": "Bob"},
        {"rep_id": "r3", "name": "Cara"},
    ],
    "targets": [
        {"month": "2025-01", "target": 50000},
        {"month": "2025-02", "target": 50000},
        {"month": "2025-03", "target": 100000},
    ],
    "deals": [
        {"deal_id": "d1", "account_id": "a1", "rep_id": "r1", "stage": "Closed Won", "amount": 60000,
         "created_at": "2025-01-05", "closed_at": "2025-03-10"},
        {"deal_id": "d2", "account_id": "a2", "rep_id": "r1", "stage": "lost", "amount": 20000,
         "created_at": "2025-01-10", "closed_at": "2025-02-15"},
        {"deal_id": "d3", "account_id": "a1", "rep_id": "r2", "stage": "Negotiation", "amount": 40000,
         "created_at": "2025-01-20", "closed_at": None},
        {"deal_id": "d4", "account_id": "a3", "rep_id": "r2", "stage": "prospecting", "amount": 10000,
         "created_at": "2025-03-20", "closed_at": None},
        {"deal_id": "d5", "account_id": "a2", "rep_id": "r3", "stage": "won", "amount": 30000,
         "created_at": "2024-11-01", "closed_at": "2024-12-15"},
        {"deal_id": "d6", "account_id": "a3", "rep_id": "r3", "stage": "Closed Lost", "amount": 5000,
         "created_at": "2025-02-01", "closed_at": "2025-03-01"},
        {"deal_id": "d7", "account_id": "a4", "rep_id": "r1", "stage": "Prospecting", "amount": 15000,
         "created_at": "2025-01-02", "closed_at": None},
    ],
    "activities": [
        {"activity_id": "x1", "deal_id": "d3", "type": "Call", "timestamp": "2025-03-25"},
        {"activity_id": "x2", "deal_id": "d3", "type": "email", "timestamp": "2025-02-01"},
        {"activity_id": "x3", "deal_id": "d4", "type": " DEMO ", "timestamp": "2025-03-21"},
        {"activity_id": "x4", "deal_id": "d1", "type": "call", "timestamp": "2025-03-01"},
    ],
}


@pytest.fixture
def sample_rows() -> dict[str, list]:
    """Raw rows for a small, hand-checked Q1 2025 snapshot (deep copy, safe to mutate)."""
    return copy.deepcopy(SAMPLE_ROWS)


@pytest.fixture
def sample_raw(sample_rows: dict[str, list]) -> RawDataset:
    return RawDataset.from_rows(**sample_rows)


@pytest.fixture
def sample_store(sample_raw: RawDataset) -> CanonicalStore:
    """Canonical store built from the sample rows through the cleaning pipeline."""
    store, _ = clean_dataset(sample_raw)
    return store


@pytest.fixture
def sample_data_dir(tmp_path: Path, sample_rows: dict[str, list]) -> Path:
    """Directory holding <collection>.json files for the sample rows."""
    for name, rows in sample_rows.items():
        (tmp_path / f"{name}.json").write_text(json.dumps(rows), encoding="utf-8")
    return tmp_path
