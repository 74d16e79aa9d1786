"""Tests for statement date and amount parsing."""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from dateutil.relativedelta import relativedelta

from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import (
    format_statement_date,
    get_date_range,
    parse_date,
    parse_statement_date,
)


class TestParseStatementDate:
    def test_four_digit_year(self):
        assert parse_statement_date("15.01.2024") == date(2024, 1, 15)

    def test_two_digit_year_expands_to_2000s(self):
        assert parse_statement_date("01.01.24") == date(2024, 1, 1)

    def test_two_digit_69_is_2069(self):
        assert parse_statement_date("31.12.69") == date(2069, 12, 31)

    def test_year_before_1970_rejected(self):
        with pytest.raises(ValueError):
            parse_statement_date("31.12.1969")

    def test_1970_accepted(self):
        assert parse_statement_date("01.01.1970") == date(1970, 1, 1)

    @pytest.mark.parametrize("value", ["", "2024-01-15", "32.01.2024", "15/01/2024", "abc"])
    def test_invalid_dates_rejected(self, value):
        with pytest.raises(ValueError):
            parse_statement_date(value)

    def test_surrounding_whitespace(self):
        assert parse_statement_date(" 02.03.2024 ") == date(2024, 3, 2)

    def test_format_statement_date(self):
        assert format_statement_date(date(2024, 1, 5)) == "05.01.2024"


class TestParseAmount:
    def test_grouped_amount(self):
        assert parse_amount("1.234,56") == Decimal("1234.56")

    def test_negative_amount(self):
        assert parse_amount("-50,00") == Decimal("-50.00")

    def test_plain_integer(self):
        assert parse_amount("42") == Decimal("42.00")

    def test_currency_symbol(self):
        assert parse_amount("12,50 €") == Decimal("12.50")
        assert parse_amount("12,50 EUR") == Decimal("12.50")

    def test_parentheses_are_negative(self):
        assert parse_amount("(123,45)") == Decimal("-123.45")

    def test_rounds_to_cents(self):
        assert parse_amount("0,006") == Decimal("0.01")

    def test_custom_separators(self):
        assert parse_amount("1,234.56", decimal_separator=".", group_separator=",") == Decimal("1234.56")

    @pytest.mark.parametrize("value", ["", "   ", "abc", "1,2,3x", "--5"])
    def test_invalid_amounts_rejected(self, value):
        with pytest.raises(ValueError):
            parse_amount(value)


def test_parse_absolute_cli_date():
    """Day-first dates and ISO dates are both accepted."""
    assert parse_date("15.01.2024") == date(2024, 1, 15)
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_relative_cli_dates():
    today = date.today()
    assert parse_date("today") == today
    assert parse_date("yesterday") == today - timedelta(days=1)
    assert parse_date("this month") == today.replace(day=1)
    assert parse_date("last year") == today.replace(month=1, day=1) - relativedelta(years=1)


def test_parse_invalid_cli_date():
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_get_date_range_last_month():
    start, end = get_date_range("last-month")
    assert start.day == 1
    assert end == date.today().replace(day=1) - timedelta(days=1)
    assert start <= end


def test_get_date_range_unknown_period():
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("next-decade")
