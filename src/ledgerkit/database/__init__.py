"""Database layer for ledgerkit."""

from ledgerkit.database.base import Database, LedgerSession
from ledgerkit.database.factories import create_sqlite_database

__all__ = ["Database", "LedgerSession", "create_sqlite_database"]
