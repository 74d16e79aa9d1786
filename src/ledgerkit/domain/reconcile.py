"""Reconciliation of a remote ledger snapshot into the local store.

Every strategy runs inside a single unit of work and commits once. A
failure anywhere leaves the store in its previously committed state.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.errors import DomainError, OperationCancelled, PolicyError, unknown_strategy
from ledgerkit.domain.snapshot import (
    ApplyStats,
    LedgerSnapshot,
    SnapshotApplier,
    read_snapshot,
    restore_snapshot,
)

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    """Conflict resolution strategy for a reconciliation."""

    REPLACE = "replace"
    MERGE = "merge"
    PRESERVE_LOCAL = "preserve-local"
    ASK_USER = "ask-user"

    @classmethod
    def parse(cls, value: "Strategy | str") -> "Strategy":
        """Look up a strategy by name; '_' and ' ' are accepted for '-'.

        Raises:
            PolicyError: If the name is not a supported strategy
        """
        if isinstance(value, Strategy):
            return value
        key = str(value).strip().lower().replace("_", "-").replace(" ", "-")
        for strategy in cls:
            if strategy.value == key:
                return strategy
        raise PolicyError(unknown_strategy(str(value), [s.value for s in cls]))


class ReconcileState(str, Enum):
    IDLE = "idle"
    RECONCILING = "reconciling"
    COMMITTED = "committed"
    FAILED = "failed"


STATUS_COMMITTED = "committed"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"
STATUS_MANUAL = "requires_manual_resolution"


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation, as reported to the caller."""

    success: bool
    strategy: Strategy
    status: str
    pending_decision: bool = False
    added: dict[str, int] = field(default_factory=dict)
    skipped: dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None


class Reconciler:
    """Applies a remote snapshot to the local ledger.

    Replace clears the ledger and rebuilds it from the snapshot; any
    unresolvable reference fails the whole operation. Merge and
    preserve-local add what is missing locally and skip entities whose
    references cannot be resolved. Ask-user flags a pending decision and
    then behaves as replace.

    No retries are attempted; callers re-invoke on failure.
    """

    def __init__(self, db: Database, default_category: str = "Other"):
        self.db = db
        self.default_category = default_category
        self.state = ReconcileState.IDLE
        self.active_strategy: Optional[Strategy] = None

    def reconcile(
        self, snapshot: LedgerSnapshot, strategy: Strategy | str, cancel_event=None
    ) -> ReconcileResult:
        """Reconcile ``snapshot`` into the local ledger.

        Raises:
            PolicyError: If ``strategy`` is not supported
        """
        strategy = Strategy.parse(strategy)
        pending_decision = strategy is Strategy.ASK_USER
        self.state = ReconcileState.RECONCILING
        self.active_strategy = strategy
        logger.info("Reconciling snapshot from %s with strategy %s", snapshot.device, strategy.value)

        if strategy is Strategy.PRESERVE_LOCAL:
            logger.info("preserve-local adds only missing entities, same as merge")
        if pending_decision:
            logger.warning("ask-user has no interactive resolution; applying replace")

        try:
            with self.db.unit_of_work() as session:
                if strategy in (Strategy.REPLACE, Strategy.ASK_USER):
                    stats = restore_snapshot(
                        session,
                        snapshot,
                        strict=True,
                        default_category=self.default_category,
                        cancel_event=cancel_event,
                    )
                else:
                    applier = SnapshotApplier(
                        session,
                        strict=False,
                        default_category=self.default_category,
                        cancel_event=cancel_event,
                    )
                    stats = applier.apply(snapshot)
                session.commit()
        except OperationCancelled as e:
            logger.info("Reconciliation cancelled: %s", e)
            return self._failed(strategy, str(e), pending_decision, status=STATUS_CANCELLED)
        except DomainError as e:
            logger.error("Reconciliation with strategy %s failed: %s", strategy.value, e)
            return self._failed(strategy, str(e), pending_decision)

        self.state = ReconcileState.COMMITTED
        return self._committed(strategy, stats, pending_decision)

    def reconcile_file(
        self, path: Path | str, strategy: Strategy | str, cancel_event=None
    ) -> ReconcileResult:
        """Read a snapshot file and reconcile it.

        An unreadable or malformed file yields a failed result.

        Raises:
            PolicyError: If ``strategy`` is not supported
        """
        strategy = Strategy.parse(strategy)
        try:
            snapshot = read_snapshot(path)
        except (OSError, DomainError) as e:
            self.active_strategy = strategy
            logger.error("Could not read snapshot %s: %s", path, e)
            return self._failed(strategy, str(e), strategy is Strategy.ASK_USER)
        return self.reconcile(snapshot, strategy, cancel_event=cancel_event)

    def _committed(
        self, strategy: Strategy, stats: ApplyStats, pending_decision: bool
    ) -> ReconcileResult:
        return ReconcileResult(
            success=True,
            strategy=strategy,
            status=STATUS_MANUAL if pending_decision else STATUS_COMMITTED,
            pending_decision=pending_decision,
            added=dict(stats.added),
            skipped=dict(stats.skipped),
        )

    def _failed(
        self,
        strategy: Strategy,
        error: str,
        pending_decision: bool,
        status: str = STATUS_FAILED,
    ) -> ReconcileResult:
        self.state = ReconcileState.FAILED
        return ReconcileResult(
            success=False,
            strategy=strategy,
            status=status,
            pending_decision=pending_decision,
            error=error,
        )
