"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


MIN_STATEMENT_YEAR = 1970


def parse_statement_date(date_str: str) -> date:
    """Parse a statement date in ``dd.mm.yyyy`` or ``dd.mm.yy`` form.

    Two-digit years are expanded into the 20xx century.

    Raises:
        ValueError: If the date does not parse or falls before 1970
    """
    raw = date_str.strip()
    parts = raw.split(".")
    if len(parts) == 3 and len(parts[2]) == 2:
        raw = f"{parts[0]}.{parts[1]}.20{parts[2]}"

    try:
        parsed = datetime.strptime(raw, "%d.%m.%Y").date()
    except ValueError as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")

    if parsed.year < MIN_STATEMENT_YEAR:
        raise ValueError(f"Year {parsed.year} of date '{date_str}' is before {MIN_STATEMENT_YEAR}")
    return parsed


def format_statement_date(value: date) -> str:
    """Format a date the way statement lines are reported back."""
    return value.strftime("%d.%m.%Y")


def parse_date(date_str: str) -> date:
    """Parse a date typed on the command line.

    Supports absolute dates (day-first, e.g. "15.01.2024" or "2024-01-15")
    and a few relative forms: "today", "yesterday", "this month",
    "last month", "this year", "last year".

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this year": today.replace(month=1, day=1),
        "last year": today.replace(month=1, day=1) - relativedelta(years=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: One of this-month, last-month, this-year, last-year

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return (today.replace(day=1), today)

    elif period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        end_date = today.replace(day=1) - timedelta(days=1)
        return (start_date, end_date)

    elif period == "this-year":
        return (today.replace(month=1, day=1), today)

    elif period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        end_date = today.replace(month=1, day=1) - timedelta(days=1)
        return (start_date, end_date)

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, last-month, this-year, last-year"
        )
