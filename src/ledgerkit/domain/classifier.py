"""Category classification for imported statement lines.

The import pipeline only depends on the ``Classifier`` protocol. The
keyword classifier here is the default implementation; any object with a
matching ``classify`` method can be passed instead.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from difflib import SequenceMatcher
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Classifier(Protocol):
    """Best-effort category lookup for cleaned usage text."""

    def classify(self, usage: str, amount: Decimal) -> Optional[str]:
        """Return a category name, or None when nothing matches."""
        ...


@dataclass
class CategoryRule:
    """Substring pattern that maps usage text to a category."""

    pattern: str
    category: str
    match_count: int = 0


DEFAULT_RULES: list[tuple[str, str]] = [
    # Cash deposits are transfers from the cash box to the checking account
    ("sb-einzahlung", "Cash Deposit"),
    ("sb einzahlung", "Cash Deposit"),
    ("selbstbedienungs-einzahlung", "Cash Deposit"),
    ("geldautomat einzahlung", "Cash Deposit"),
    ("cash deposit", "Cash Deposit"),
    # Payroll
    ("gehalt", "Personnel"),
    ("lohn", "Personnel"),
    ("salary", "Personnel"),
    # Platform payouts
    ("uber", "Income"),
    ("wolt", "Income"),
    ("lieferando", "Income"),
    # Insurance
    ("krankenkasse", "Health Insurance"),
    ("krankenversicherung", "Health Insurance"),
    ("aok", "Health Insurance"),
    ("versicherung", "Insurance"),
    # Taxes
    ("finanzamt", "Taxes"),
    ("steuer", "Taxes"),
    # Utilities
    ("strom", "Utilities"),
    ("energie", "Utilities"),
    ("vodafone", "Phone"),
    ("telekom", "Phone"),
    # Premises
    ("miete", "Rent"),
    ("nebenkosten", "Rent"),
    # Supplies
    ("verpackung", "Packaging"),
    ("karton", "Packaging"),
    ("recup", "Packaging"),
    ("einkauf", "Purchasing"),
    ("material", "Purchasing"),
    # Services
    ("steuerberater", "Accounting"),
    ("buchhaltung", "Accounting"),
    ("werbung", "Advertising"),
    ("marketing", "Advertising"),
    ("reparatur", "Maintenance"),
    ("wartung", "Maintenance"),
    # Deposits
    ("kaution", "Deposit"),
    ("pfand", "Deposit"),
]


class KeywordClassifier:
    """Rule-based classifier with a fuzzy fallback.

    Rules are checked in order; the first pattern contained in the usage
    text wins. Without a substring hit, the rule whose pattern is most
    similar to the whole usage text is used if the similarity exceeds
    ``similarity_threshold``.
    """

    def __init__(
        self,
        rules: Optional[list[CategoryRule]] = None,
        similarity_threshold: float = 0.8,
    ):
        if rules is None:
            rules = [CategoryRule(pattern, category) for pattern, category in DEFAULT_RULES]
        self.rules = rules
        self.similarity_threshold = similarity_threshold

    def classify(self, usage: str, amount: Decimal) -> Optional[str]:
        text = (usage or "").strip().lower()
        if not text:
            return None

        for rule in self.rules:
            if rule.pattern.lower() in text:
                rule.match_count += 1
                return rule.category

        best: Optional[tuple[float, CategoryRule]] = None
        for rule in self.rules:
            ratio = SequenceMatcher(None, text, rule.pattern.lower()).ratio()
            if ratio > self.similarity_threshold and (best is None or ratio > best[0]):
                best = (ratio, rule)

        if best is not None:
            logger.debug("Fuzzy match '%s' -> %s (%.2f)", usage, best[1].category, best[0])
            best[1].match_count += 1
            return best[1].category
        return None

    def add_rule(self, pattern: str, category: str) -> None:
        """Add a rule, or re-point an existing pattern to a new category."""
        for rule in self.rules:
            if rule.pattern.lower() == pattern.lower():
                rule.category = category
                return
        self.rules.insert(0, CategoryRule(pattern, category))

    def remove_rule(self, pattern: str) -> None:
        self.rules = [rule for rule in self.rules if rule.pattern.lower() != pattern.lower()]


class NullClassifier:
    """Classifier that never matches."""

    def classify(self, usage: str, amount: Decimal) -> Optional[str]:
        return None
