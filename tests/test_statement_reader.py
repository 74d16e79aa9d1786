"""Tests for the lexical statement reader and column resolver."""

import pytest

from ledgerkit.domain.columns import ColumnMap, normalize_label, resolve_columns
from ledgerkit.domain.errors import ParseError, ValidationError
from ledgerkit.utils.csv_reader import detect_delimiter, read_statement, split_row


def test_detect_semicolon_delimiter():
    assert detect_delimiter("Datum;Konto;Betrag;Name;Zweck") == ";"


def test_detect_comma_delimiter():
    assert detect_delimiter("Date,Account,Amount") == ","


def test_detect_delimiter_tie_prefers_comma():
    assert detect_delimiter("Date,Account;Amount") == ","


def test_split_row_respects_quotes():
    fields = split_row('15.01.2024,Giro,"-1.234,56","Shop, Inc.",x', ",")
    assert fields == ["15.01.2024", "Giro", "-1.234,56", "Shop, Inc.", "x"]


def test_split_row_trims_fields():
    assert split_row(" a ; b ;c ", ";") == ["a", "b", "c"]


def test_read_statement_skips_blank_lines_and_numbers_rows():
    table = read_statement("\ufeffDate;Account;Amount\n\n01.01.2024;Giro;1,00\n  \n02.01.2024;Giro;2,00\n")
    assert table.header == ["Date", "Account", "Amount"]
    assert table.delimiter == ";"
    assert table.rows == [(2, "01.01.2024;Giro;1,00"), (3, "02.01.2024;Giro;2,00")]


def test_read_statement_empty_raises_parse_error():
    with pytest.raises(ParseError, match="empty"):
        read_statement(" \n\n  \n")


def test_normalize_label():
    assert normalize_label(" Amount (EUR) ") == "amounteur"
    assert normalize_label("Verwendungs-Zweck") == "verwendungszweck"


def test_resolve_english_header():
    columns = resolve_columns(["PostingDate", "AccountName", "AmountEUR", "Name", "PaymentPurpose"])
    assert columns == ColumnMap(date=0, account=1, amount=2, name=3, purpose=4)


def test_resolve_german_header_case_insensitive():
    columns = resolve_columns(["DATUM", "konto", "Betrag", "Name", "Zweck"])
    assert (columns.date, columns.account, columns.amount) == (0, 1, 2)
    assert columns.purpose == 4
    assert columns.category is None


def test_main_category_preferred_over_category():
    columns = resolve_columns(["Category", "Date", "Account", "Amount", "MainCategory"])
    assert columns.category == 4


def test_first_matching_column_wins():
    columns = resolve_columns(["Date", "ValueDate", "Account", "Amount"])
    assert columns.date == 0


def test_max_index():
    columns = resolve_columns(["Name", "Date", "Account", "Amount", "Purpose"])
    assert columns.max_index == 4


def test_missing_required_columns_raise_validation_error():
    with pytest.raises(ValidationError) as excinfo:
        resolve_columns(["Date", "Name", "Purpose"])

    message = str(excinfo.value)
    assert "missing required columns" in message.lower()
    assert "account" in message
    assert "amount" in message
