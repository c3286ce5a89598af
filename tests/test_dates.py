"""Tests for coverage period extraction."""

from datetime import date

import pytest

from coi_intake.extraction.dates import (
    DATE_STRATEGIES,
    extract_dates,
    find_dates,
    format_date,
    parse_date,
)
from coi_intake.utils.config import ExtractionConfig


class TestParseDate:
    """Tests for the supported date notations."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1/15/2024", date(2024, 1, 15)),
            ("01-15-2024", date(2024, 1, 15)),
            ("1/15/24", date(2024, 1, 15)),
            ("January 15, 2024", date(2024, 1, 15)),
            ("Jan 15 2024", date(2024, 1, 15)),
            ("Sept 3, 2024", date(2024, 9, 3)),
            ("15 March 2024", date(2024, 3, 15)),
        ],
    )
    def test_supported_formats(self, text: str, expected: date) -> None:
        assert parse_date(text) == expected

    def test_invalid_date(self) -> None:
        assert parse_date("13/45/2024") is None
        assert parse_date("not a date") is None

    def test_format_date_has_no_leading_zeros(self) -> None:
        assert format_date(date(2025, 3, 1)) == "3/1/2025"


class TestFindDates:
    def test_finds_mixed_notations_in_order(self) -> None:
        tokens = find_dates("From 1/2/2024 until March 5, 2024 or 7 June 2024")
        assert [t.text for t in tokens] == ["1/2/2024", "March 5, 2024", "7 June 2024"]

    def test_ignores_longer_numbers(self) -> None:
        assert find_dates("Ref 123/45/67890") == []


class TestExtractDates:
    """Tests for the ordered date strategies."""

    def test_strategy_order(self) -> None:
        assert [name for name, _ in DATE_STRATEGIES] == [
            "adjacent_pair",
            "policy_term_pair",
            "labeled_keywords",
        ]

    def test_adjacent_pair_in_source_order(self) -> None:
        result = extract_dates("01/01/2024 01/01/2025")
        assert result.effective == "01/01/2024"
        assert result.expiration == "01/01/2025"
        assert result.strategy == "adjacent_pair"

    def test_adjacent_pair_keeps_first_pair(self) -> None:
        text = "GL 02/01/2024   02/01/2025\nAUTO 05/01/2024 05/01/2025"
        result = extract_dates(text)
        assert (result.effective, result.expiration) == ("02/01/2024", "02/01/2025")

    def test_policy_term_pair_is_chronological(self) -> None:
        text = "Expires on 3/1/2025 for the period that began on 3/1/2024."
        result = extract_dates(text)
        assert result.effective == "3/1/2024"
        assert result.expiration == "3/1/2025"
        assert result.strategy == "policy_term_pair"

    def test_policy_term_pair_skips_unrelated_dates(self) -> None:
        text = "Issued 6/10/2024. Term: 7/1/2024 through the end, ending 7/1/2025."
        result = extract_dates(text)
        assert (result.effective, result.expiration) == ("7/1/2024", "7/1/2025")

    def test_labeled_keywords(self) -> None:
        text = "Effective Date: 06/01/2024\nNotes\nExpiration Date: 12/01/2024"
        result = extract_dates(text)
        assert result.effective == "06/01/2024"
        assert result.expiration == "12/01/2024"
        assert result.strategy == "labeled_keywords"

    def test_synthesizes_expiration(self) -> None:
        result = extract_dates("Effective: 3/1/2025")
        assert result.effective == "3/1/2025"
        assert result.expiration == "3/1/2026"
        assert result.strategy == "synthesized"

    def test_synthesized_term_is_configurable(self) -> None:
        config = ExtractionConfig(synthesized_term_days=30)
        result = extract_dates("Effective: 3/1/2025", config)
        assert result.expiration == "3/31/2025"

    def test_month_name_dates(self) -> None:
        result = extract_dates("January 15, 2024 January 15, 2025")
        assert result.effective == "January 15, 2024"
        assert result.expiration == "January 15, 2025"

    def test_no_dates(self) -> None:
        result = extract_dates("No coverage period listed")
        assert result.effective is None
        assert result.expiration is None
