"""Domain model entities for ledgerkit.

These are pure data classes representing business concepts, independent of
database schema. Names are the join keys for groups, accounts and
categories; transactions are keyed by their UUID.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional


TRANSACTION_TYPES = ("income", "expense", "transfer")


@dataclass(frozen=True)
class AccountGroup:
    """Account group domain entity."""

    id: int
    name: str


@dataclass(frozen=True)
class Account:
    """Account domain entity."""

    id: int
    name: str
    group_id: int
    account_type: Optional[str] = None
    include_in_balance: bool = True


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    name: str


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``uuid`` is assigned at creation and is stable across replicas.
    """

    id: int
    uuid: str
    account_id: int
    category_id: int
    type: str
    amount: Decimal
    date: date
    usage: Optional[str] = None
    target_account_id: Optional[int] = None


@dataclass(frozen=True)
class RecordInfo:
    """Human-readable view of one imported or skipped statement line."""

    date: str
    amount: Decimal
    account: str
    usage: Optional[str]
    category: str


@dataclass
class ImportResult:
    """Outcome of one statement import."""

    imported: list[RecordInfo] = field(default_factory=list)
    skipped: list[RecordInfo] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        return (
            f"{len(self.imported)} transactions imported, "
            f"{len(self.skipped)} duplicates skipped"
        )
