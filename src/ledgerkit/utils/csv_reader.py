"""Lexical reader for bank statement exports."""

import csv
from dataclasses import dataclass, field

from ledgerkit.domain.errors import ParseError


@dataclass
class StatementTable:
    """Header and raw data lines of one statement file.

    ``rows`` holds (line_number, raw_line) pairs; line numbers are 1-based
    and count the header as line 1.
    """

    header: list[str]
    delimiter: str
    rows: list[tuple[int, str]] = field(default_factory=list)


def split_lines(text: str) -> list[str]:
    """Split text into trimmed, non-empty lines."""
    lines = (line.strip() for line in text.splitlines())
    return [line for line in lines if line]


def detect_delimiter(header_line: str) -> str:
    """Pick ';' when it occurs more often than ',' in the header, else ','."""
    if header_line.count(";") > header_line.count(","):
        return ";"
    return ","


def split_row(line: str, delimiter: str) -> list[str]:
    """Split one line into fields, honouring double-quoted segments.

    Raises:
        ParseError: If the line cannot be tokenized
    """
    try:
        fields = next(csv.reader([line], delimiter=delimiter, strict=True))
    except (csv.Error, StopIteration) as e:
        raise ParseError(f"Could not split row: {e}") from e
    return [value.strip().strip('"').strip() for value in fields]


def read_statement(text: str) -> StatementTable:
    """Read raw statement text into a header and data lines.

    Raises:
        ParseError: If the text contains no lines
    """
    lines = split_lines(text.lstrip("\ufeff"))
    if not lines:
        raise ParseError("CSV file is empty")

    delimiter = detect_delimiter(lines[0])
    header = split_row(lines[0], delimiter)
    table = StatementTable(header=header, delimiter=delimiter)
    table.rows = [(number, line) for number, line in enumerate(lines[1:], start=2)]
    return table
