"""Mapping of statement header labels to semantic column roles."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ledgerkit.domain.errors import ValidationError, missing_columns


class ColumnRole(str, Enum):
    DATE = "date"
    ACCOUNT = "account"
    AMOUNT = "amount"
    CATEGORY = "category"
    NAME = "name"
    PURPOSE = "purpose"


REQUIRED_ROLES = (ColumnRole.DATE, ColumnRole.ACCOUNT, ColumnRole.AMOUNT)

# Keys are normalized labels: lowercase, letters and digits only.
# English labels first, then the German ones banks actually export.
COLUMN_SYNONYMS: dict[ColumnRole, tuple[str, ...]] = {
    ColumnRole.DATE: ("date", "postingdate", "valuedate", "datum", "buchungsdatum", "valutadatum"),
    ColumnRole.ACCOUNT: ("account", "accountname", "konto"),
    ColumnRole.AMOUNT: ("amount", "amounteur", "betrag"),
    ColumnRole.NAME: ("name",),
    ColumnRole.PURPOSE: (
        "purpose",
        "paymentpurpose",
        "reference",
        "zweck",
        "verwendungszweck",
        "verwendung",
    ),
}

# Main category wins over a plain category column
MAIN_CATEGORY_LABELS = ("maincategory", "hauptkategorie")
CATEGORY_LABELS = ("category", "kategorie")


def normalize_label(label: str) -> str:
    """Lowercase a header label and drop everything but letters and digits."""
    return re.sub(r"[^0-9a-zäöüß]", "", label.strip().lower())


@dataclass(frozen=True)
class ColumnMap:
    """Resolved column positions for one statement header."""

    date: int
    account: int
    amount: int
    category: Optional[int] = None
    name: Optional[int] = None
    purpose: Optional[int] = None

    @property
    def max_index(self) -> int:
        """Highest resolved column index; rows must be longer than this."""
        indices = [self.date, self.account, self.amount, self.category, self.name, self.purpose]
        return max(i for i in indices if i is not None)


def resolve_columns(header: list[str]) -> ColumnMap:
    """Resolve header labels to column roles.

    The first column matching a role wins.

    Raises:
        ValidationError: If date, account or amount cannot be resolved
    """
    positions: dict[ColumnRole, int] = {}
    main_category: Optional[int] = None
    category: Optional[int] = None

    for index, label in enumerate(header):
        key = normalize_label(label)
        if key in MAIN_CATEGORY_LABELS and main_category is None:
            main_category = index
            continue
        if key in CATEGORY_LABELS and category is None:
            category = index
            continue
        for role, synonyms in COLUMN_SYNONYMS.items():
            if key in synonyms and role not in positions:
                positions[role] = index
                break

    missing = [role.value for role in REQUIRED_ROLES if role not in positions]
    if missing:
        raise ValidationError(missing_columns(missing))

    return ColumnMap(
        date=positions[ColumnRole.DATE],
        account=positions[ColumnRole.ACCOUNT],
        amount=positions[ColumnRole.AMOUNT],
        category=main_category if main_category is not None else category,
        name=positions.get(ColumnRole.NAME),
        purpose=positions.get(ColumnRole.PURPOSE),
    )
