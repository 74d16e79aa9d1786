"""Free-text cleanup for statement name and purpose fields.

Each transform is a pure ``str -> str`` function and is idempotent. They
run in the order of ``CLEANING_PIPELINE``: addresses, timestamps,
reference codes, boilerplate, then encoding repair and whitespace.
"""

import re
from typing import Callable, Optional


TextTransform = Callable[[str], str]

ADDRESS_PATTERNS = [
    re.compile(
        r"\b\w+\s*(?:Strasse|Straße|Str\.|Platz|Allee|Weg|Gasse)(?!\w)[^,]*?(?:,\s*\d{5}\s*[A-Za-zÄÖÜäöüß]+)?",
        re.IGNORECASE,
    ),
    re.compile(r"\b\d{5}\s*[A-Za-zÄÖÜäöüß]+", re.IGNORECASE),
]

TIMESTAMP_PATTERNS = [
    re.compile(r"DATUM\s*\d{2}\.\d{2}\.\d{4},?\s*\d{1,2}[.:]\d{2}\s*UHR", re.IGNORECASE),
    re.compile(r"\b\d{8}\s*-\s*\d{3}\b"),
    re.compile(r"\b\d{2}\.\d{2}\.\d{4}\b"),
    re.compile(r"\b\d{2}/\d{4}\b"),
]

# A marker word followed by the token it labels, e.g. "Kd.Nr. 4711"
REFERENCE_CODE_PATTERNS = [
    re.compile(
        r"\b(?:Betriebsnummer|Kd\.Nr\.|Rg\.Nr\.|Vertragsnummer|Steuernummer|VK|Inv|Drp|Sr|Ga)(?!\w)\s*\S*",
        re.IGNORECASE,
    ),
    re.compile(r"\bFi-\S*", re.IGNORECASE),
    re.compile(r"\b[A-Za-z0-9]+(?:/\d+){5}\b"),
    re.compile(r"Awv-Meldepflicht Beachten Hotline Bundesbank \(0800\) 1234-111", re.IGNORECASE),
    re.compile(r"\b\d{6,}\b"),
]

BOILERPLATE_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"Pop Svcs, Dob",
        r"einschl\. Ruecklastschriftgebuehr",
        r"Vielen Dank f(?:ü|√º|ue)r Ihren Besuch",
        r"Wolt Auszahlung",
        r"Basis-Rente",
        r"Unfallversicherung",
        r"S(?:ä|√§|ae)umniszuschlag",
        r"Erstattung.*",
        r"Reservierung.*",
        r"Entgeltabrechnung.*",
        r"Abrechnung.*",
        r"Falsch Buchung.*",
    )
]

# UTF-8 umlauts that were decoded as Mac Roman somewhere upstream
MOJIBAKE_REPAIRS = {
    "√§": "ä",
    "√∂": "ö",
    "√º": "ü",
    "√ü": "ß",
    "√Ñ": "Ä",
    "√ñ": "Ö",
    "√ú": "Ü",
    "√©": "é",
    "√®": "è",
    "√°": "á",
}


def _apply(patterns: list[re.Pattern], text: str) -> str:
    for pattern in patterns:
        text = pattern.sub(" ", text)
    return text


def strip_addresses(text: str) -> str:
    """Remove street names and postcode/city fragments."""
    return _apply(ADDRESS_PATTERNS, text)


def strip_timestamps(text: str) -> str:
    """Remove embedded dates, times and booking-period stamps."""
    return _apply(TIMESTAMP_PATTERNS, text)


def strip_reference_codes(text: str) -> str:
    """Remove customer, invoice and mandate numbers and long digit runs."""
    return _apply(REFERENCE_CODE_PATTERNS, text)


def strip_boilerplate(text: str) -> str:
    """Remove bank and payee boilerplate phrases."""
    return _apply(BOILERPLATE_PATTERNS, text)


def repair_encoding(text: str) -> str:
    """Replace known mis-encoded accented characters."""
    for broken, fixed in MOJIBAKE_REPAIRS.items():
        text = text.replace(broken, fixed)
    return text


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace and trim."""
    return " ".join(text.split())


CLEANING_PIPELINE: tuple[TextTransform, ...] = (
    strip_addresses,
    strip_timestamps,
    strip_reference_codes,
    strip_boilerplate,
    repair_encoding,
    collapse_whitespace,
)


def clean_text(text: Optional[str]) -> str:
    """Run the full cleaning pipeline over one field."""
    if not text:
        return ""
    for transform in CLEANING_PIPELINE:
        text = transform(text)
    return text


def build_usage(name: Optional[str], purpose: Optional[str], max_length: int = 50) -> Optional[str]:
    """Combine cleaned name and purpose into the stored usage text.

    The purpose is dropped when it equals the name. Returns None when
    nothing is left after cleaning.
    """
    cleaned_name = clean_text(name)
    cleaned_purpose = clean_text(purpose)

    parts = []
    if cleaned_name:
        parts.append(cleaned_name)
    if cleaned_purpose and cleaned_purpose != cleaned_name:
        parts.append(cleaned_purpose)

    usage = " ".join(parts)[:max_length].strip()
    return usage or None
