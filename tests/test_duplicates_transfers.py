"""Tests for duplicate detection and transfer expansion."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerkit.domain.duplicates import DuplicateDetector, DuplicateKey
from ledgerkit.domain.entities import Account
from ledgerkit.domain.transfers import PendingTransaction, TransferExpander


@pytest.fixture
def stored_transaction(temp_db, sample_ledger):
    """One stored expense on Giro: 10.01.2024, -25.00, 'Kiosk'."""
    with temp_db.unit_of_work() as session:
        giro = session.get_account_by_name("Giro")
        other = session.get_category_by_name("Other")
        session.add_transaction(
            uuid="6f1c1f0e-9a51-4a57-9d0e-0d5d3f3c2a11",
            account_id=giro.id,
            category_id=other.id,
            type="expense",
            amount=Decimal("-25.00"),
            date=date(2024, 1, 10),
            usage="Kiosk",
        )
        session.commit()
    return giro


class TestDuplicateDetector:
    def _is_duplicate(self, db, key):
        with db.unit_of_work() as session:
            return DuplicateDetector(session).is_duplicate(key)

    def test_exact_match(self, temp_db, stored_transaction):
        key = DuplicateKey(stored_transaction.id, date(2024, 1, 10), Decimal("-25.00"), "Kiosk")
        assert self._is_duplicate(temp_db, key)

    @pytest.mark.parametrize("day", [9, 11])
    def test_date_within_one_day(self, temp_db, stored_transaction, day):
        key = DuplicateKey(stored_transaction.id, date(2024, 1, day), Decimal("-25.00"), "Kiosk")
        assert self._is_duplicate(temp_db, key)

    @pytest.mark.parametrize("day", [8, 12])
    def test_date_outside_window(self, temp_db, stored_transaction, day):
        key = DuplicateKey(stored_transaction.id, date(2024, 1, day), Decimal("-25.00"), "Kiosk")
        assert not self._is_duplicate(temp_db, key)

    def test_amount_difference_of_a_cent_is_not_duplicate(self, temp_db, stored_transaction):
        key = DuplicateKey(stored_transaction.id, date(2024, 1, 10), Decimal("-25.01"), "Kiosk")
        assert not self._is_duplicate(temp_db, key)

    def test_usage_must_match(self, temp_db, stored_transaction):
        key = DuplicateKey(stored_transaction.id, date(2024, 1, 10), Decimal("-25.00"), "Kiosk 2")
        assert not self._is_duplicate(temp_db, key)

    def test_other_account_is_not_duplicate(self, temp_db, stored_transaction):
        savings = [a for a in temp_db.list_accounts() if a.name == "Savings"][0]
        key = DuplicateKey(savings.id, date(2024, 1, 10), Decimal("-25.00"), "Kiosk")
        assert not self._is_duplicate(temp_db, key)

    def test_empty_and_missing_usage_match(self, temp_db, sample_ledger):
        with temp_db.unit_of_work() as session:
            giro = session.get_account_by_name("Giro")
            other = session.get_category_by_name("Other")
            session.add_transaction(
                uuid="0b8e3e4c-5a0e-4d8e-9b55-3f6a0fb2b7c2",
                account_id=giro.id,
                category_id=other.id,
                type="expense",
                amount=Decimal("-5.00"),
                date=date(2024, 2, 1),
                usage=None,
            )
            session.commit()

        key = DuplicateKey(giro.id, date(2024, 2, 1), Decimal("-5.00"), "")
        assert self._is_duplicate(temp_db, key)

    def test_pending_rows_are_visible_in_same_session(self, temp_db, sample_ledger):
        with temp_db.unit_of_work() as session:
            giro = session.get_account_by_name("Giro")
            other = session.get_category_by_name("Other")
            session.add_transaction(
                uuid="1d2c4b8a-7e0f-4f55-8e3b-9c6d5a4b3c21",
                account_id=giro.id,
                category_id=other.id,
                type="expense",
                amount=Decimal("-7.00"),
                date=date(2024, 3, 1),
                usage="Bakery",
            )
            key = DuplicateKey(giro.id, date(2024, 3, 2), Decimal("-7.00"), "Bakery")
            assert DuplicateDetector(session).is_duplicate(key)


def _leg(source: Account, target: Account | None, amount="-100.00") -> PendingTransaction:
    return PendingTransaction(
        uuid="a3f9d7c2-1b4e-4c1a-8f0d-2e5b6c7d8e9f",
        account=source,
        category="Transfer",
        type="transfer",
        amount=Decimal(amount),
        date=date(2024, 1, 15),
        usage="Umbuchung",
        target_account=target,
    )


class TestTransferExpander:
    giro = Account(id=1, name="Giro", group_id=1)
    cash = Account(id=2, name="Bargeld", group_id=1)
    savings = Account(id=3, name="Savings", group_id=1)

    def test_transfer_gets_mirrored_counter_leg(self):
        legs = TransferExpander().expand(_leg(self.giro, self.savings))

        assert len(legs) == 2
        source, counter = legs
        assert counter.account == self.savings
        assert counter.target_account == self.giro
        assert counter.amount == Decimal("100.00")
        assert counter.uuid != source.uuid
        assert counter.category == source.category
        assert counter.usage == source.usage

    def test_cash_to_checking_is_suppressed(self):
        legs = TransferExpander().expand(_leg(self.cash, self.giro))
        assert len(legs) == 1
        assert legs[0].account == self.cash

    def test_checking_to_cash_is_mirrored(self):
        assert len(TransferExpander().expand(_leg(self.giro, self.cash))) == 2

    def test_positive_transfer_amount_is_debited_from_source(self):
        source, counter = TransferExpander().expand(_leg(self.giro, self.savings, amount="100.00"))

        assert source.account == self.giro
        assert source.amount == Decimal("-100.00")
        assert counter.amount == Decimal("100.00")

    def test_suppressed_leg_is_still_debited(self):
        (source,) = TransferExpander().expand(_leg(self.cash, self.giro, amount="50.00"))
        assert source.amount == Decimal("-50.00")

    def test_markers_are_case_insensitive_substrings(self):
        expander = TransferExpander(cash_markers=("KASSE",), checking_markers=("girokonto",))
        cash_box = Account(id=4, name="Hauptkasse", group_id=1)
        checking = Account(id=5, name="Mein Girokonto", group_id=1)
        assert expander.is_suppressed(cash_box, checking)
        assert not expander.is_suppressed(checking, cash_box)

    def test_non_transfer_passes_through(self):
        leg = _leg(self.giro, None)
        assert TransferExpander().expand(leg) == [leg]
