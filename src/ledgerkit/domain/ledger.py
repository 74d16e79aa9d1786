"""Ledger domain service for groups, accounts and categories."""

from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    Account as AccountEntity,
    AccountGroup as AccountGroupEntity,
    Category as CategoryEntity,
    Transaction as TransactionEntity,
)
from ledgerkit.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_name,
    group_not_found,
)

RESERVED_CATEGORIES = ("Other", "Income")


def _require_name(name: str, kind: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError(f"{kind} name must not be empty")
    return name


class LedgerService:
    """Service for managing the ledger's named entities."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account_group(self, name: str) -> AccountGroupEntity:
        """Create a new account group.

        Args:
            name: Group name

        Returns:
            The created group

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a group with this name already exists
        """
        name = _require_name(name, "Account group")
        with self.db.unit_of_work() as session:
            if session.get_account_group_by_name(name) is not None:
                raise ConflictError(duplicate_name("Account group", name))
            group = session.add_account_group(name)
            session.commit()
        return group

    def list_account_groups(self) -> list[AccountGroupEntity]:
        return self.db.list_account_groups()

    def create_account(
        self,
        name: str,
        group_name: str,
        account_type: Optional[str] = None,
        include_in_balance: bool = True,
    ) -> AccountEntity:
        """Create a new account inside an existing group.

        Args:
            name: Account name, unique across the ledger
            group_name: Name of the owning account group
            account_type: Free-form type tag (e.g. "bank", "cash")
            include_in_balance: Whether the account counts towards the total balance

        Returns:
            The created account

        Raises:
            ValidationError: If the name is empty
            NotFoundError: If the group doesn't exist
            ConflictError: If an account with this name already exists
        """
        name = _require_name(name, "Account")
        with self.db.unit_of_work() as session:
            group = session.get_account_group_by_name(group_name)
            if group is None:
                raise NotFoundError(group_not_found(group_name))
            if session.get_account_by_name(name) is not None:
                raise ConflictError(duplicate_name("Account", name))
            account = session.add_account(
                name=name,
                group_id=group.id,
                account_type=account_type,
                include_in_balance=include_in_balance,
            )
            session.commit()
        return account

    def list_accounts(self) -> list[AccountEntity]:
        return self.db.list_accounts()

    def get_account(self, name: str) -> AccountEntity:
        """Look up an account by name.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        for account in self.db.list_accounts():
            if account.name == name:
                return account
        raise NotFoundError(account_not_found(name))

    def create_category(self, name: str) -> CategoryEntity:
        """Create a new category.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a category with this name already exists
        """
        name = _require_name(name, "Category")
        with self.db.unit_of_work() as session:
            if session.get_category_by_name(name) is not None:
                raise ConflictError(duplicate_name("Category", name))
            category = session.add_category(name)
            session.commit()
        return category

    def list_categories(self) -> list[CategoryEntity]:
        return self.db.list_categories()

    def ensure_default_categories(self, names: tuple[str, ...] = RESERVED_CATEGORIES) -> int:
        """Create the reserved categories that don't exist yet.

        Returns:
            Number of categories created
        """
        created = 0
        with self.db.unit_of_work() as session:
            for name in names:
                if session.get_category_by_name(name) is None:
                    session.add_category(name)
                    created += 1
            session.commit()
        return created

    def list_transactions(
        self,
        account_name: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[TransactionEntity]:
        """List transactions, newest first.

        Raises:
            NotFoundError: If ``account_name`` doesn't exist
        """
        account_id = self.get_account(account_name).id if account_name else None
        return self.db.list_transactions(
            start_date=start_date, end_date=end_date, account_id=account_id
        )

    def get_balance(self, account_name: str) -> Decimal:
        return self.db.get_account_balance(self.get_account(account_name).id)

    def get_total_balance(self) -> Decimal:
        """Sum of balances over accounts flagged for balance inclusion."""
        total = Decimal("0.00")
        for account in self.db.list_accounts():
            if account.include_in_balance:
                total += self.db.get_account_balance(account.id)
        return total
