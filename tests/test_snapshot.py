"""Tests for the ledger snapshot codec."""

import json
import pytest
from datetime import date
from decimal import Decimal

from ledgerkit.domain.errors import ParseError, UnresolvedReferenceError
from ledgerkit.domain.snapshot import (
    AccountRecord,
    CategoryRecord,
    GroupRecord,
    LedgerSnapshot,
    TransactionRecord,
    capture_snapshot,
    compute_data_hash,
    date_to_epoch,
    dumps,
    epoch_to_date,
    loads,
    restore_snapshot,
)

TXN_A = "5b1d3c2e-0f4a-4b6c-8d7e-9f0a1b2c3d4e"
TXN_B = "7c2e4d3f-1a5b-4c7d-9e8f-0a1b2c3d4e5f"


@pytest.fixture
def populated_ledger(temp_db, sample_ledger):
    """Sample ledger with an expense and a transfer pair."""
    with temp_db.unit_of_work() as session:
        giro = session.get_account_by_name("Giro")
        savings = session.get_account_by_name("Savings")
        rent = session.add_category("Rent")
        transfer = session.add_category("Transfer")
        session.add_transaction(
            uuid=TXN_A,
            account_id=giro.id,
            category_id=rent.id,
            type="expense",
            amount=Decimal("-900.00"),
            date=date(2024, 1, 3),
            usage="Landlord Miete",
        )
        session.add_transaction(
            uuid=TXN_B,
            account_id=savings.id,
            category_id=transfer.id,
            type="transfer",
            amount=Decimal("200.00"),
            date=date(2024, 1, 5),
            target_account_id=giro.id,
        )
        session.commit()
    return temp_db


def _capture(db):
    with db.unit_of_work() as session:
        return capture_snapshot(session)


def test_epoch_conversion():
    assert date_to_epoch(date(1970, 1, 2)) == 86400
    assert epoch_to_date(1704240000) == date(2024, 1, 3)
    assert epoch_to_date(date_to_epoch(date(2024, 2, 29))) == date(2024, 2, 29)


def test_capture_snapshot(populated_ledger):
    snapshot = _capture(populated_ledger)

    assert snapshot.counts() == {
        "categories": 4,
        "account_groups": 1,
        "accounts": 3,
        "transactions": 2,
    }
    assert snapshot.account_groups == [GroupRecord("Main", ["Bargeld", "Giro", "Savings"])]
    savings = [a for a in snapshot.accounts if a.name == "Savings"][0]
    assert savings.include_in_balance is False
    assert savings.transactions == [TXN_B]
    transfer = [t for t in snapshot.transactions if t.id == TXN_B][0]
    assert transfer.target_account == "Giro"
    assert transfer.usage is None
    assert snapshot.version == "2.0"
    assert snapshot.data_hash == compute_data_hash(snapshot)


def test_document_layout(populated_ledger):
    document = json.loads(dumps(_capture(populated_ledger)))

    assert set(document) >= {"accountGroups", "accounts", "categories", "transactions", "dataHash"}
    expense = [t for t in document["transactions"] if t["id"] == TXN_A][0]
    assert expense == {
        "id": TXN_A,
        "type": "expense",
        "amount": -900.0,
        "date": 1704240000,
        "category": "Rent",
        "account": "Giro",
        "usage": "Landlord Miete",
    }
    transfer = [t for t in document["transactions"] if t["id"] == TXN_B][0]
    assert transfer["targetAccount"] == "Giro"
    assert "usage" not in transfer


def test_round_trip_through_json(populated_ledger):
    snapshot = _capture(populated_ledger)
    decoded = loads(dumps(snapshot))

    assert decoded == snapshot


def test_data_hash_ignores_timestamps(populated_ledger):
    first = _capture(populated_ledger)
    second = _capture(populated_ledger)
    second.timestamp = (first.timestamp or 0) + 100

    assert compute_data_hash(first) == compute_data_hash(second)


def test_data_hash_changes_with_content(populated_ledger):
    snapshot = _capture(populated_ledger)
    before = compute_data_hash(snapshot)
    snapshot.transactions.pop()

    assert compute_data_hash(snapshot) != before


def test_restore_rebuilds_ledger(populated_ledger, remote_db):
    snapshot = _capture(populated_ledger)

    with remote_db.unit_of_work() as session:
        stats = restore_snapshot(session, snapshot)
        session.commit()

    assert stats.added["transactions"] == 2
    restored = _capture(remote_db)
    assert restored.counts() == snapshot.counts()
    assert {t.id for t in restored.transactions} == {TXN_A, TXN_B}
    assert compute_data_hash(restored) == compute_data_hash(snapshot)


def test_restore_clears_existing_data(populated_ledger):
    empty = LedgerSnapshot()

    with populated_ledger.unit_of_work() as session:
        restore_snapshot(session, empty)
        session.commit()

    assert populated_ledger.list_transactions() == []
    assert populated_ledger.list_accounts() == []
    assert populated_ledger.list_categories() == []


def test_restore_skips_unresolvable_references(temp_db):
    snapshot = LedgerSnapshot(
        account_groups=[GroupRecord("Main", ["Giro"])],
        accounts=[
            AccountRecord("Giro", "Main"),
            AccountRecord("Orphan", "Missing Group"),
        ],
        transactions=[
            TransactionRecord(TXN_A, "expense", Decimal("-5.00"), 1704240000, "", "Giro"),
            TransactionRecord(TXN_B, "expense", Decimal("-6.00"), 1704240000, "Food", "Orphan"),
        ],
    )

    with temp_db.unit_of_work() as session:
        stats = restore_snapshot(session, snapshot)
        session.commit()

    assert [a.name for a in temp_db.list_accounts()] == ["Giro"]
    assert stats.skipped["accounts"] == 1
    assert stats.skipped["transactions"] == 1
    transactions = temp_db.list_transactions()
    assert len(transactions) == 1
    # Empty category falls back to Other
    other = [c for c in temp_db.list_categories() if c.name == "Other"][0]
    assert transactions[0].category_id == other.id


def test_strict_restore_raises(temp_db):
    snapshot = LedgerSnapshot(accounts=[AccountRecord("Orphan", "Missing Group")])

    with temp_db.unit_of_work() as session:
        with pytest.raises(UnresolvedReferenceError):
            restore_snapshot(session, snapshot, strict=True)


def test_legacy_type_tags_are_mapped(temp_db):
    snapshot = LedgerSnapshot(
        categories=[CategoryRecord("Income")],
        account_groups=[GroupRecord("Main")],
        accounts=[AccountRecord("Giro", "Main")],
        transactions=[
            TransactionRecord(TXN_A, "einnahme", Decimal("5.00"), 1704240000, "Income", "Giro"),
        ],
    )

    with temp_db.unit_of_work() as session:
        restore_snapshot(session, snapshot)
        session.commit()

    assert temp_db.list_transactions()[0].type == "income"


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        '{"transactions": {}}',
        '{"accounts": [{"group": "Main"}]}',
        '{"transactions": [{"id": "x", "amount": "abc", "date": 0, "account": "Giro"}]}',
        '{"transactions": [{"id": "x", "amount": 1, "date": "yesterday", "account": "Giro"}]}',
        '{"transactions": [{"id": "x", "amount": 1, "date": 1e20, "account": "Giro"}]}',
        '{"transactions": [{"id": "x", "amount": NaN, "date": 0, "account": "Giro"}]}',
        '{"transactions": [{"id": "x", "amount": Infinity, "date": 0, "account": "Giro"}]}',
        '{"categories": ""}',
    ],
)
def test_malformed_documents_raise_parse_error(text):
    with pytest.raises(ParseError):
        loads(text)


def test_empty_optional_fields_decode_as_none():
    snapshot = loads(
        '{"transactions": [{"id": "%s", "type": "expense", "amount": -1.5, "date": 0,'
        ' "category": "Other", "account": "Giro", "targetAccount": "", "usage": ""}]}' % TXN_A
    )

    txn = snapshot.transactions[0]
    assert txn.target_account is None
    assert txn.usage is None
    assert txn.amount == Decimal("-1.50")
