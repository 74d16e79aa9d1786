"""Runtime settings for ledgerkit.

Values come from environment variables where one exists, otherwise from
the defaults below. The CLI overrides individual fields from its options.
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional


DEFAULT_HOME = Path.home() / ".ledgerkit"


def _default_transfer_routes() -> dict[str, str]:
    # category name -> target account name
    return {"Cash Deposit": "Giro"}


@dataclass
class LedgerSettings:
    """Settings shared by the import pipeline, backup and reconciler."""

    database_path: Optional[str] = None
    backup_dir: Path = field(default_factory=lambda: DEFAULT_HOME / "backups")
    merge_strategy: str = "merge"

    # Import normalization
    usage_max_length: int = 50
    decimal_separator: str = ","
    group_separator: str = "."
    account_aliases: dict[str, str] = field(default_factory=dict)

    # Duplicate detection
    date_window_days: int = 1
    amount_tolerance: Decimal = Decimal("0.01")

    # Reserved categories
    default_category: str = "Other"
    income_category: str = "Income"

    # Transfers
    transfer_routes: dict[str, str] = field(default_factory=_default_transfer_routes)
    cash_account_markers: tuple[str, ...] = ("cash", "bargeld")
    checking_account_markers: tuple[str, ...] = ("checking", "giro")


def load_settings() -> LedgerSettings:
    """Build settings from the LEDGERKIT_* environment variables.

    Raises:
        PolicyError: If LEDGERKIT_MERGE_STRATEGY names an unknown strategy
    """
    # Imported here so config stays importable from the domain layer
    from ledgerkit.domain.reconcile import Strategy

    settings = LedgerSettings()
    settings.database_path = os.environ.get("LEDGERKIT_DB_PATH")

    backup_dir = os.environ.get("LEDGERKIT_BACKUP_DIR")
    if backup_dir:
        settings.backup_dir = Path(backup_dir)

    strategy = os.environ.get("LEDGERKIT_MERGE_STRATEGY")
    if strategy:
        settings.merge_strategy = Strategy.parse(strategy).value

    return settings
