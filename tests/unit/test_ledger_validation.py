"""Unit tests for ledger input validation."""

from datetime import date
from decimal import Decimal

import pytest

from messmate.errors import ValidationError
from messmate.services.balance_service import current_month, month_bounds
from messmate.services.ledger_service import parse_amount, validate_entry_date, validate_meal_count


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("250", Decimal("250")),
            ("99.5", Decimal("99.5")),
            (Decimal("0.01"), Decimal("0.01")),
            (12, Decimal("12")),
        ],
    )
    def test_valid_amounts(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", ["0", "-10", "abc", "", "NaN", "Infinity"])
    def test_invalid_amounts(self, value):
        with pytest.raises(ValidationError, match="Enter valid amount"):
            parse_amount(value)

    def test_more_than_two_decimals(self):
        with pytest.raises(ValidationError, match="two decimal places"):
            parse_amount("1.005")


class TestEntryDate:
    """Tests for validate_entry_date."""

    def test_today_is_allowed(self):
        assert validate_entry_date(date(2025, 3, 10), today=date(2025, 3, 10)) == date(2025, 3, 10)

    def test_future_date_rejected(self):
        with pytest.raises(ValidationError, match="future"):
            validate_entry_date(date(2025, 3, 11), today=date(2025, 3, 10))

    def test_earlier_month_than_start(self):
        with pytest.raises(ValidationError, match="start month"):
            validate_entry_date(date(2025, 2, 28), today=date(2025, 3, 20), start_date=date(2025, 3, 5))

    def test_before_start_date(self):
        with pytest.raises(ValidationError, match=r"start date \(05/03/2025\)"):
            validate_entry_date(date(2025, 3, 4), today=date(2025, 3, 20), start_date=date(2025, 3, 5))

    def test_on_or_after_start_date(self):
        start = date(2025, 3, 5)

        assert validate_entry_date(start, today=date(2025, 3, 20), start_date=start) == start


class TestMealCount:
    """Tests for validate_meal_count."""

    def test_zero_and_positive(self):
        assert validate_meal_count("Lunch", 0) == 0
        assert validate_meal_count("Lunch", 3) == 3

    @pytest.mark.parametrize("value", [-1, 1.5, "2", True, None])
    def test_rejects_non_counts(self, value):
        with pytest.raises(ValidationError, match="Lunch"):
            validate_meal_count("Lunch", value)


class TestMonthTokens:
    """Tests for month helpers."""

    def test_current_month_format(self):
        assert current_month(date(2025, 7, 31)) == "2025-07"

    def test_month_bounds_handles_leap_year(self):
        assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))

    def test_month_bounds_december(self):
        assert month_bounds("2025-12") == (date(2025, 12, 1), date(2025, 12, 31))

    @pytest.mark.parametrize("token", ["2025", "2025-13", "25-01-01", "abcd-ef", ""])
    def test_month_bounds_rejects_bad_tokens(self, token):
        with pytest.raises(ValidationError):
            month_bounds(token)
