"""Mapper functions to convert between domain models and SQLAlchemy models.

ORM instances never leave the database package; everything above it works
with the frozen entities from ``ledgerkit.domain.entities``.
"""

from decimal import Decimal

from ledgerkit.domain import entities as domain
from ledgerkit.database.models import (
    AccountGroup as ORMAccountGroup,
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)


def account_group_to_domain(orm_group: ORMAccountGroup) -> domain.AccountGroup:
    """Convert SQLAlchemy AccountGroup model to domain AccountGroup entity."""
    return domain.AccountGroup(id=orm_group.id, name=orm_group.name)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        group_id=orm_account.group_id,
        account_type=orm_account.account_type,
        include_in_balance=bool(orm_account.include_in_balance),
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(id=orm_category.id, name=orm_category.name)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        uuid=orm_transaction.uuid,
        account_id=orm_transaction.account_id,
        category_id=orm_transaction.category_id,
        type=orm_transaction.type,
        amount=Decimal(orm_transaction.amount).quantize(Decimal("0.01")),
        date=orm_transaction.date,
        usage=orm_transaction.usage,
        target_account_id=orm_transaction.target_account_id,
    )
