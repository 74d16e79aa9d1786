"""Ledger snapshot codec.

A snapshot is a self-contained JSON document holding every account group,
account, category and transaction of a ledger. Groups, accounts and
categories are referenced by name, transactions by UUID, and dates are
stored as seconds since the epoch (UTC midnight of the booking day).
"""

import calendar
import hashlib
import json
import logging
import socket
import time
import uuid as uuid_module
from dataclasses import dataclass, field
from datetime import date, datetime, UTC
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from ledgerkit.database.base import LedgerSession
from ledgerkit.domain.entities import TRANSACTION_TYPES
from ledgerkit.domain.errors import (
    OperationCancelled,
    ParseError,
    UnresolvedReferenceError,
    account_not_found,
    category_not_found,
    group_not_found,
)
from ledgerkit.utils.date_parser import MIN_STATEMENT_YEAR

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "2.0"
ENTITY_KINDS = ("categories", "account_groups", "accounts", "transactions")

# Type tags written by older app versions
LEGACY_TYPES = {"einnahme": "income", "ausgabe": "expense", "umbuchung": "transfer"}


@dataclass(frozen=True)
class GroupRecord:
    name: str
    accounts: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AccountRecord:
    name: str
    group: str
    transactions: list[str] = field(default_factory=list)
    type: Optional[str] = None
    include_in_balance: bool = True


@dataclass(frozen=True)
class CategoryRecord:
    name: str


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    type: str
    amount: Decimal
    date: int
    category: str
    account: str
    target_account: Optional[str] = None
    usage: Optional[str] = None


@dataclass
class LedgerSnapshot:
    """Typed form of a snapshot document."""

    account_groups: list[GroupRecord] = field(default_factory=list)
    accounts: list[AccountRecord] = field(default_factory=list)
    categories: list[CategoryRecord] = field(default_factory=list)
    transactions: list[TransactionRecord] = field(default_factory=list)
    version: str = SNAPSHOT_VERSION
    timestamp: Optional[float] = None
    device: Optional[str] = None
    data_hash: Optional[str] = None

    def counts(self) -> dict[str, int]:
        return {
            "categories": len(self.categories),
            "account_groups": len(self.account_groups),
            "accounts": len(self.accounts),
            "transactions": len(self.transactions),
        }


def date_to_epoch(value: date) -> int:
    return calendar.timegm(value.timetuple())


def epoch_to_date(value: float) -> date:
    return datetime.fromtimestamp(value, UTC).date()


def compute_data_hash(snapshot: LedgerSnapshot) -> str:
    """Stable content hash of a snapshot.

    Entities are sorted and timestamps excluded, so two snapshots of the
    same ledger content hash the same regardless of when they were taken.
    """
    parts = [f"categories:{len(snapshot.categories)}"]
    parts += [f"cat:{c.name}" for c in sorted(snapshot.categories, key=lambda c: c.name)]

    parts.append(f"groups:{len(snapshot.account_groups)}")
    for group in sorted(snapshot.account_groups, key=lambda g: g.name):
        parts.append(f"grp:{group.name}:{','.join(sorted(group.accounts))}")

    parts.append(f"accounts:{len(snapshot.accounts)}")
    for account in sorted(snapshot.accounts, key=lambda a: a.name):
        parts.append(f"acc:{account.name}:{account.group}:{account.include_in_balance}")

    parts.append(f"transactions:{len(snapshot.transactions)}")
    for txn in sorted(snapshot.transactions, key=lambda t: t.id):
        parts.append(
            f"txn:{txn.id}:{txn.amount}:{txn.date}:{txn.category}:{txn.account}:"
            f"{txn.target_account or ''}:{txn.type}:{txn.usage or ''}"
        )

    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


def capture_snapshot(session: LedgerSession) -> LedgerSnapshot:
    """Read the whole ledger visible to ``session`` into a snapshot."""
    groups = session.list_account_groups()
    accounts = session.list_accounts()
    categories = session.list_categories()
    transactions = session.list_transactions()

    group_names = {g.id: g.name for g in groups}
    account_names = {a.id: a.name for a in accounts}
    category_names = {c.id: c.name for c in categories}

    txn_ids_by_account: dict[int, list[str]] = {a.id: [] for a in accounts}
    for txn in transactions:
        txn_ids_by_account.setdefault(txn.account_id, []).append(txn.uuid)

    snapshot = LedgerSnapshot(
        account_groups=[
            GroupRecord(
                name=g.name,
                accounts=[a.name for a in accounts if a.group_id == g.id],
            )
            for g in groups
        ],
        accounts=[
            AccountRecord(
                name=a.name,
                group=group_names.get(a.group_id, ""),
                transactions=txn_ids_by_account.get(a.id, []),
                type=a.account_type,
                include_in_balance=a.include_in_balance,
            )
            for a in accounts
        ],
        categories=[CategoryRecord(name=c.name) for c in categories],
        transactions=[
            TransactionRecord(
                id=t.uuid,
                type=t.type,
                amount=t.amount,
                date=date_to_epoch(t.date),
                category=category_names.get(t.category_id, ""),
                account=account_names.get(t.account_id, ""),
                target_account=account_names.get(t.target_account_id) if t.target_account_id else None,
                usage=t.usage,
            )
            for t in transactions
        ],
        timestamp=time.time(),
        device=socket.gethostname(),
    )
    snapshot.data_hash = compute_data_hash(snapshot)
    return snapshot


# Document encoding


def to_document(snapshot: LedgerSnapshot) -> dict[str, Any]:
    """Convert a snapshot into its JSON document structure."""
    transactions = []
    for t in snapshot.transactions:
        doc: dict[str, Any] = {
            "id": t.id,
            "type": t.type,
            "amount": float(t.amount),
            "date": t.date,
            "category": t.category,
            "account": t.account,
        }
        if t.target_account:
            doc["targetAccount"] = t.target_account
        if t.usage:
            doc["usage"] = t.usage
        transactions.append(doc)

    return {
        "version": snapshot.version,
        "timestamp": snapshot.timestamp,
        "device": snapshot.device,
        "dataHash": snapshot.data_hash,
        "accountGroups": [{"name": g.name, "accounts": list(g.accounts)} for g in snapshot.account_groups],
        "accounts": [
            {
                "name": a.name,
                "group": a.group,
                "type": a.type,
                "includeInBalance": a.include_in_balance,
                "transactions": list(a.transactions),
            }
            for a in snapshot.accounts
        ],
        "categories": [{"name": c.name} for c in snapshot.categories],
        "transactions": transactions,
    }


def _entries(document: dict, key: str) -> list[dict]:
    entries = document.get(key)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise ParseError(f"Snapshot field '{key}' must be a list")
    for entry in entries:
        if not isinstance(entry, dict):
            raise ParseError(f"Snapshot field '{key}' contains a non-object entry")
    return entries


def _required(entry: dict, key: str, kind: str) -> Any:
    if key not in entry or entry[key] is None:
        raise ParseError(f"Snapshot {kind} entry is missing '{key}'")
    return entry[key]


def _optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _parse_amount(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ParseError(f"Invalid amount {value!r}")
    try:
        amount = Decimal(str(value)).quantize(Decimal("0.01"))
    except InvalidOperation as e:
        raise ParseError(f"Invalid amount {value!r}") from e
    if not amount.is_finite():
        raise ParseError(f"Invalid amount {value!r}")
    return amount


def from_document(document: Any) -> LedgerSnapshot:
    """Build a typed snapshot from a decoded JSON document.

    Raises:
        ParseError: If the document structure is malformed
    """
    if not isinstance(document, dict):
        raise ParseError("Snapshot document must be a JSON object")

    snapshot = LedgerSnapshot(
        version=str(document.get("version") or SNAPSHOT_VERSION),
        timestamp=document.get("timestamp"),
        device=document.get("device"),
        data_hash=document.get("dataHash"),
    )

    for entry in _entries(document, "categories"):
        snapshot.categories.append(CategoryRecord(name=str(_required(entry, "name", "category"))))

    for entry in _entries(document, "accountGroups"):
        snapshot.account_groups.append(
            GroupRecord(
                name=str(_required(entry, "name", "account group")),
                accounts=[str(a) for a in entry.get("accounts") or []],
            )
        )

    for entry in _entries(document, "accounts"):
        snapshot.accounts.append(
            AccountRecord(
                name=str(_required(entry, "name", "account")),
                group=str(entry.get("group") or ""),
                transactions=[str(t) for t in entry.get("transactions") or []],
                type=_optional_text(entry.get("type")),
                include_in_balance=bool(entry.get("includeInBalance", True)),
            )
        )

    for entry in _entries(document, "transactions"):
        raw_date = _required(entry, "date", "transaction")
        if isinstance(raw_date, bool) or not isinstance(raw_date, (int, float)):
            raise ParseError(f"Invalid transaction date {raw_date!r}")
        try:
            epoch_to_date(raw_date)
            raw_date = int(raw_date)
        except (OverflowError, ValueError, OSError) as e:
            raise ParseError(f"Transaction date {raw_date!r} is out of range") from e
        snapshot.transactions.append(
            TransactionRecord(
                id=str(_required(entry, "id", "transaction")),
                type=str(entry.get("type") or ""),
                amount=_parse_amount(_required(entry, "amount", "transaction")),
                date=raw_date,
                category=str(entry.get("category") or ""),
                account=str(_required(entry, "account", "transaction")),
                target_account=_optional_text(entry.get("targetAccount")),
                usage=_optional_text(entry.get("usage")),
            )
        )

    return snapshot


def dumps(snapshot: LedgerSnapshot) -> str:
    return json.dumps(to_document(snapshot), indent=2, ensure_ascii=False)


def loads(text: str) -> LedgerSnapshot:
    """Decode a snapshot from JSON text.

    Raises:
        ParseError: If the text is not valid JSON or not a snapshot
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Snapshot is not valid JSON: {e}") from e
    return from_document(document)


def write_snapshot(snapshot: LedgerSnapshot, path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(snapshot), encoding="utf-8")
    return path


def read_snapshot(path: Path | str) -> LedgerSnapshot:
    """Read a snapshot file.

    Raises:
        FileNotFoundError: If the file does not exist
        ParseError: If the file is not a valid snapshot
    """
    return loads(Path(path).read_text(encoding="utf-8"))


# Applying snapshots to a store


@dataclass
class ApplyStats:
    """Per entity kind counts of inserted and skipped records."""

    added: dict[str, int] = field(default_factory=lambda: dict.fromkeys(ENTITY_KINDS, 0))
    skipped: dict[str, int] = field(default_factory=lambda: dict.fromkeys(ENTITY_KINDS, 0))


def normalize_type(raw_type: str, amount: Decimal) -> str:
    """Map a stored type tag onto income/expense/transfer."""
    tag = LEGACY_TYPES.get(raw_type.lower(), raw_type.lower())
    if tag in TRANSACTION_TYPES:
        return tag
    return "income" if amount >= 0 else "expense"


class SnapshotApplier:
    """Adds the entities of a snapshot that are missing from a session.

    Names are the keys for categories, groups and accounts; UUIDs are the
    key for transactions. Existing local entities are never modified.
    Applied to an empty store this is a full restore.

    In non-strict mode an entity whose references cannot be resolved is
    skipped with a warning; in strict mode it raises
    UnresolvedReferenceError.
    """

    def __init__(
        self,
        session: LedgerSession,
        strict: bool = False,
        default_category: str = "Other",
        cancel_event=None,
    ):
        self.session = session
        self.strict = strict
        self.default_category = default_category
        self.cancel_event = cancel_event
        self.stats = ApplyStats()

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelled("Snapshot application cancelled")

    def _unresolved(self, kind: str, message: str) -> None:
        if self.strict:
            raise UnresolvedReferenceError(message)
        logger.warning("Skipping %s: %s", kind, message)
        self.stats.skipped[kind] += 1

    def apply(self, snapshot: LedgerSnapshot) -> ApplyStats:
        self._check_cancelled()
        self._apply_categories(snapshot.categories)
        self._apply_groups(snapshot.account_groups)
        self._apply_accounts(snapshot.accounts)
        self._apply_transactions(snapshot.transactions)
        logger.info("Snapshot applied: added %s, skipped %s", self.stats.added, self.stats.skipped)
        return self.stats

    def _apply_categories(self, records: list[CategoryRecord]) -> None:
        existing = {c.name for c in self.session.list_categories()}
        for record in records:
            self._check_cancelled()
            if not record.name or record.name in existing:
                self.stats.skipped["categories"] += 1
                continue
            self.session.add_category(record.name)
            existing.add(record.name)
            self.stats.added["categories"] += 1

    def _apply_groups(self, records: list[GroupRecord]) -> None:
        existing = {g.name for g in self.session.list_account_groups()}
        for record in records:
            self._check_cancelled()
            if not record.name or record.name in existing:
                self.stats.skipped["account_groups"] += 1
                continue
            self.session.add_account_group(record.name)
            existing.add(record.name)
            self.stats.added["account_groups"] += 1

    def _apply_accounts(self, records: list[AccountRecord]) -> None:
        groups = {g.name: g for g in self.session.list_account_groups()}
        existing = {a.name for a in self.session.list_accounts()}
        for record in records:
            self._check_cancelled()
            if not record.name or record.name in existing:
                self.stats.skipped["accounts"] += 1
                continue
            group = groups.get(record.group)
            if group is None:
                self._unresolved("accounts", f"{record.name}: {group_not_found(record.group)}")
                continue
            self.session.add_account(
                name=record.name,
                group_id=group.id,
                account_type=record.type,
                include_in_balance=record.include_in_balance,
            )
            existing.add(record.name)
            self.stats.added["accounts"] += 1

    def _category_id(self, name: str, categories: dict) -> Optional[int]:
        if not name:
            # Category is never unset at rest
            name = self.default_category
            if name not in categories:
                categories[name] = self.session.add_category(name)
                self.stats.added["categories"] += 1
        category = categories.get(name)
        return category.id if category is not None else None

    def _apply_transactions(self, records: list[TransactionRecord]) -> None:
        accounts = {a.name: a for a in self.session.list_accounts()}
        categories = {c.name: c for c in self.session.list_categories()}
        known_ids = self.session.transaction_ids()

        for record in records:
            self._check_cancelled()
            try:
                txn_id = str(uuid_module.UUID(record.id))
            except ValueError:
                self._unresolved("transactions", f"invalid transaction id '{record.id}'")
                continue

            if txn_id in known_ids:
                self.stats.skipped["transactions"] += 1
                continue

            if record.amount == 0:
                self._unresolved("transactions", f"{txn_id}: amount is zero")
                continue

            try:
                booking_date = epoch_to_date(record.date)
            except (OverflowError, ValueError, OSError):
                booking_date = None
            if booking_date is None or booking_date.year < MIN_STATEMENT_YEAR:
                self._unresolved(
                    "transactions", f"{txn_id}: date {record.date} is out of range"
                )
                continue

            account = accounts.get(record.account)
            if account is None:
                self._unresolved("transactions", f"{txn_id}: {account_not_found(record.account)}")
                continue

            category_id = self._category_id(record.category, categories)
            if category_id is None:
                self._unresolved("transactions", f"{txn_id}: {category_not_found(record.category)}")
                continue

            target_id = None
            if record.target_account:
                target = accounts.get(record.target_account)
                if target is None:
                    logger.warning(
                        "Transaction %s: target %s, storing without target",
                        txn_id,
                        account_not_found(record.target_account),
                    )
                else:
                    target_id = target.id

            self.session.add_transaction(
                uuid=txn_id,
                account_id=account.id,
                category_id=category_id,
                type=normalize_type(record.type, record.amount),
                amount=record.amount,
                date=booking_date,
                usage=record.usage,
                target_account_id=target_id,
            )
            known_ids.add(txn_id)
            self.stats.added["transactions"] += 1


def restore_snapshot(
    session: LedgerSession,
    snapshot: LedgerSnapshot,
    strict: bool = False,
    default_category: str = "Other",
    cancel_event=None,
) -> ApplyStats:
    """Replace everything in ``session`` with the content of ``snapshot``.

    All four entity collections are cleared first. Nothing is committed;
    the caller commits the session.
    """
    session.delete_all()
    applier = SnapshotApplier(
        session, strict=strict, default_category=default_category, cancel_event=cancel_event
    )
    return applier.apply(snapshot)
