"""Tests for date and amount parsing rules."""

import pytest

from extractors.financial_rules import (
    TransactionType,
    format_amount_display,
    parse_amount,
    parse_date,
)


class TestParseDate:
    """Test suite for parse_date."""

    def test_parse_day_first_date(self):
        assert parse_date("05/01/2024") == "2024-01-05"
        assert parse_date("31/12/2023") == "2023-12-31"

    def test_trailing_noise_is_ignored(self):
        assert parse_date("05/01/2024 10:32:11") == "2024-01-05"
        assert parse_date("  05/01/2024  ") == "2024-01-05"

    def test_single_digit_components_are_padded(self):
        assert parse_date("5/1/2024") == "2024-01-05"

    @pytest.mark.parametrize("raw", [
        "31/02/2024",   # not a calendar date
        "29/02/2023",   # not a leap year
        "01/13/2024",   # month out of range
        "00/01/2024",
        "05-01-2024",   # wrong separator
        "05/01",        # missing year
        "05/01/2024/1",
        "aa/bb/cccc",
        "",
        "   ",
        None,
        20240105,
    ])
    def test_invalid_dates_return_none(self, raw):
        assert parse_date(raw) is None

    def test_leap_day(self):
        assert parse_date("29/02/2024") == "2024-02-29"


class TestParseAmount:
    """Test suite for parse_amount."""

    def test_thousands_separator_and_cr_marker(self):
        assert parse_amount("1,234.50 CR") == 1234.50
        assert parse_amount("10000.00CR") == 10000.00
        assert parse_amount("10000.00cr") == 10000.00

    def test_currency_symbols(self):
        assert parse_amount("$99.99") == 99.99
        assert parse_amount("₹1,23,456.00") == 123456.00

    def test_plain_numbers(self):
        assert parse_amount("500.00") == 500.00
        assert parse_amount(" 42 ") == 42.0

    def test_underscore_separators_are_rejected(self):
        assert parse_amount("1_000") == 0.0
        assert parse_amount("1_000.00 CR") == 0.0

    @pytest.mark.parametrize("raw", [None, "", "abc", "CR", "1.2.3", "nan", "inf", 500, ["1"]])
    def test_unparseable_amounts_are_zero(self, raw):
        assert parse_amount(raw) == 0


class TestFormatAmountDisplay:

    def test_expense_is_negative(self):
        assert format_amount_display(250, TransactionType.EXPENSE) == "-250.00"

    def test_income_is_positive(self):
        assert format_amount_display(1600, TransactionType.INCOME) == "+1600.00"
