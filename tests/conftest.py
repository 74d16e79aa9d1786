"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
from pathlib import Path
import pytest

from ledgerkit.config import LedgerSettings
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.backup import BackupService
from ledgerkit.domain.classifier import NullClassifier
from ledgerkit.domain.csv_import import StatementImportService
from ledgerkit.domain.ledger import LedgerService
from ledgerkit.domain.reconcile import Reconciler


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def remote_db():
    """A second, independent ledger acting as another device."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def settings(tmp_path):
    """Default settings with backups going to a temporary directory."""
    return LedgerSettings(backup_dir=tmp_path / "backups")


@pytest.fixture
def sample_ledger(ledger_service):
    """Group 'Main' with accounts Giro, Bargeld and Savings plus reserved categories."""
    ledger_service.create_account_group("Main")
    ledger_service.create_account("Giro", "Main", account_type="bank")
    ledger_service.create_account("Bargeld", "Main", account_type="cash")
    ledger_service.create_account("Savings", "Main", account_type="bank", include_in_balance=False)
    ledger_service.ensure_default_categories()
    return ledger_service


@pytest.fixture
def import_service(temp_db, sample_ledger, settings):
    """Import service without classifier rules and without automatic backup."""
    return StatementImportService(temp_db, classifier=NullClassifier(), settings=settings)


@pytest.fixture
def backup_service(temp_db, settings):
    """Create a BackupService writing into a temporary directory."""
    return BackupService(temp_db, settings.backup_dir)


@pytest.fixture
def reconciler(temp_db):
    """Create a Reconciler for the local temporary database."""
    return Reconciler(temp_db)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
