"""Unit tests for field-level cleaning parsers."""

from datetime import date

import pytest

from sales_insights.cleaning.parsers import (
    clean_activity_type,
    clean_text,
    is_month_key,
    normalize_stage,
    parse_amount,
    parse_iso_date,
    to_number_or_none,
)


class TestParseIsoDate:
    """Tests for parse_iso_date."""

    def test_plain_date(self) -> None:
        assert parse_iso_date("2025-01-05") == date(2025, 1, 5)

    def test_timestamp_keeps_date_part(self) -> None:
        assert parse_iso_date("2025-01-05T14:30:00Z") == date(2025, 1, 5)
        assert parse_iso_date("2025-01-05 14:30") == date(2025, 1, 5)
        assert parse_iso_date("2025-01-05T14:30:00.125+02:00") == date(2025, 1, 5)

    @pytest.mark.parametrize(
        "value",
        ["2025-02-30", "2025-13-01", "05/01/2025", "", "not a date", None, 20250105,
         "2025-01-05 not a date", "2025-01-05T", "2025-01-05T14:30junk"],
    )
    def test_invalid_returns_none(self, value) -> None:
        assert parse_iso_date(value) is None


class TestNumbers:
    def test_numeric_string(self) -> None:
        assert to_number_or_none(" 1200.5 ") == 1200.5

    def test_rejects_bool_nan_and_text(self) -> None:
        assert to_number_or_none(True) is None
        assert to_number_or_none("nan") is None
        assert to_number_or_none(float("inf")) is None
        assert to_number_or_none("12k") is None
        assert to_number_or_none([1]) is None

    def test_negative_amount_discarded_not_clamped(self) -> None:
        """Negative amounts become None, never 0."""
        assert parse_amount(-5) is None
        assert parse_amount("0") == 0.0
        assert parse_amount(99) == 99.0


class TestNormalizeStage:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("won", "Closed Won"),
            (" Closed-Won ", "Closed Won"),
            ("LOST", "Closed Lost"),
            ("closed-lost", "Closed Lost"),
            ("prospect", "Prospecting"),
            ("Negotiating", "Negotiation"),
        ],
    )
    def test_synonyms(self, raw: str, expected: str) -> None:
        assert normalize_stage(raw) == expected

    def test_unknown_string_passes_through(self) -> None:
        assert normalize_stage("Discovery") == "Discovery"

    def test_non_string_is_unknown(self) -> None:
        assert normalize_stage(None) == "Unknown"
        assert normalize_stage(3) == "Unknown"


class TestText:
    def test_clean_text(self) -> None:
        assert clean_text("  Acme ") == "Acme"
        assert clean_text(42) is None

    def test_activity_type(self) -> None:
        assert clean_activity_type(" Call ") == "call"
        assert clean_activity_type(None) == "unknown"

    def test_is_month_key(self) -> None:
        assert is_month_key("2025-03")
        assert not is_month_key("2025-3")
        assert not is_month_key("2025-13")
        assert not is_month_key("2025-03-01")
        assert not is_month_key(202503)
