"""Automatic full-ledger snapshot backups."""

import logging
import time
from pathlib import Path
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.snapshot import (
    LedgerSnapshot,
    capture_snapshot,
    read_snapshot,
    write_snapshot,
)

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "ledger-backup-"


def _backup_stamp(path: Path) -> int:
    # ledger-backup-<epoch millis>.json
    stamp = path.stem[len(BACKUP_PREFIX):]
    return int(stamp) if stamp.isdigit() else 0


class BackupService:
    """Service for writing and locating ledger backups."""

    def __init__(self, db: Database, backup_dir: Path | str):
        """Initialize backup service.

        Args:
            db: Database instance
            backup_dir: Directory backups are written to; created on demand
        """
        self.db = db
        self.backup_dir = Path(backup_dir)

    def current_snapshot(self) -> LedgerSnapshot:
        """Capture the committed state of the ledger."""
        with self.db.unit_of_work() as session:
            return capture_snapshot(session)

    def create_backup(self) -> Path:
        """Write the current ledger as a new backup file.

        Returns:
            Path of the written backup

        Raises:
            OSError: If the backup directory or file cannot be written
        """
        snapshot = self.current_snapshot()
        path = self.backup_dir / f"{BACKUP_PREFIX}{int(time.time() * 1000)}.json"
        write_snapshot(snapshot, path)
        logger.info("Backup written to %s (%d transactions)", path, len(snapshot.transactions))
        return path

    def list_backups(self) -> list[Path]:
        """Backup files, oldest first."""
        if not self.backup_dir.is_dir():
            return []
        return sorted(self.backup_dir.glob(f"{BACKUP_PREFIX}*.json"), key=_backup_stamp)

    def latest_backup(self) -> Optional[Path]:
        backups = self.list_backups()
        return backups[-1] if backups else None

    def has_local_changes(self) -> bool:
        """True when the ledger differs from the newest backup.

        A ledger without any backup counts as changed. An unreadable backup
        also counts as changed.
        """
        latest = self.latest_backup()
        if latest is None:
            return True
        try:
            previous = read_snapshot(latest)
        except (OSError, ValueError) as e:
            logger.warning("Could not read backup %s: %s", latest, e)
            return True
        return previous.data_hash != self.current_snapshot().data_hash
