"""Utility functions for ledgerkit."""

from ledgerkit.utils.date_parser import parse_date, parse_statement_date
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.text_cleaning import build_usage, clean_text

__all__ = ["parse_date", "parse_statement_date", "parse_amount", "build_usage", "clean_text"]
