"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str, decimal_separator: str = ",", group_separator: str = ".") -> Decimal:
    """Parse a locale-formatted amount string into a Decimal.

    Handles various formats (defaults are the German locale):
    - "1.234,56"
    - "-50,00"
    - "12,5 €"
    - "(123,45)" (negative in parentheses)

    Args:
        amount_str: Amount string
        decimal_separator: Character separating the fraction
        group_separator: Thousands grouping character

    Returns:
        Decimal amount rounded to cents

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and codes
    normalized = re.sub(r"[$€£¥]|\bEUR\b", "", amount_str).strip()
    normalized = normalized.replace(" ", "").replace("\u00a0", "")

    normalized = normalized.replace(group_separator, "")
    normalized = normalized.replace(decimal_separator, ".")

    if not re.fullmatch(r"[+-]?\d+(\.\d+)?", normalized):
        raise ValueError(f"Could not parse amount '{amount_str}'")

    try:
        amount = Decimal(normalized).quantize(Decimal("0.01"))
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if is_negative:
        amount = -amount
    return amount
