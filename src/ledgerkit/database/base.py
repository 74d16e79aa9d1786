"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    AccountGroup,
    Account,
    Category,
    Transaction,
)


class LedgerSession(ABC):
    """One isolated working session against the ledger store.

    Nothing written through a session is visible to other sessions until
    ``commit()`` succeeds. A session that is closed without committing
    discards its pending work.
    """

    # Account group operations
    @abstractmethod
    def add_account_group(self, name: str) -> AccountGroup:
        """Create an account group."""
        pass

    @abstractmethod
    def get_account_group_by_name(self, name: str) -> Optional[AccountGroup]:
        """Get account group by name."""
        pass

    @abstractmethod
    def list_account_groups(self) -> list[AccountGroup]:
        """List all account groups."""
        pass

    # Account operations
    @abstractmethod
    def add_account(
        self,
        name: str,
        group_id: int,
        account_type: Optional[str] = None,
        include_in_balance: bool = True,
    ) -> Account:
        """Create an account in a group."""
        pass

    @abstractmethod
    def get_account_by_name(self, name: str) -> Optional[Account]:
        """Get account by name."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    # Category operations
    @abstractmethod
    def add_category(self, name: str) -> Category:
        """Create a category."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    # Transaction operations
    @abstractmethod
    def add_transaction(
        self,
        uuid: str,
        account_id: int,
        category_id: int,
        type: str,
        amount: Decimal,
        date: date,
        usage: Optional[str] = None,
        target_account_id: Optional[int] = None,
    ) -> Transaction:
        """Create a transaction."""
        pass

    @abstractmethod
    def find_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        usage: Optional[str] = None,
        match_usage: bool = False,
    ) -> list[Transaction]:
        """Fetch transactions matching all given predicates.

        Args:
            account_id: Owning account
            start_date: Inclusive lower date bound
            end_date: Inclusive upper date bound
            usage: Usage text to compare against when ``match_usage`` is set
            match_usage: If True, usage must equal ``usage`` (None matches empty)
        """
        pass

    @abstractmethod
    def transaction_ids(self) -> set[str]:
        """Return the UUIDs of all transactions."""
        pass

    @abstractmethod
    def list_transactions(self) -> list[Transaction]:
        """List all transactions."""
        pass

    @abstractmethod
    def delete_transaction(self, uuid: str) -> None:
        """Delete a transaction by UUID."""
        pass

    @abstractmethod
    def delete_all(self) -> None:
        """Delete every transaction, account, account group and category."""
        pass

    # Unit of work control
    @abstractmethod
    def commit(self) -> None:
        """Atomically persist all pending work or raise PersistenceError."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard all pending work."""
        pass


class Database(ABC):
    """Abstract database interface for ledgerkit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[LedgerSession]:
        """Open a mutating working session.

        Mutating units of work against one database are serialized.
        """
        pass

    # Read-only queries
    @abstractmethod
    def list_account_groups(self) -> list[AccountGroup]:
        """List all account groups."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def get_account_balance(self, account_id: int) -> Decimal:
        """Sum of all transaction amounts owned by an account."""
        pass
