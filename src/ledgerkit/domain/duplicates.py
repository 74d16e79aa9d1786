"""Duplicate detection for re-imported statement lines."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from ledgerkit.database.base import LedgerSession
from ledgerkit.domain.entities import Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateKey:
    """The fields a statement line is compared on."""

    account_id: int
    date: date
    amount: Decimal
    usage: Optional[str]


class DuplicateDetector:
    """Finds existing transactions that represent the same statement line.

    Banks reformat free text slightly between exports, so this is not an
    exact field match: the date may differ by up to ``date_window_days``
    and the amount by less than ``amount_tolerance``. Account and usage
    text must match exactly, with None and "" treated as equal.
    """

    def __init__(
        self,
        session: LedgerSession,
        date_window_days: int = 1,
        amount_tolerance: Decimal = Decimal("0.01"),
    ):
        self.session = session
        self.date_window = timedelta(days=date_window_days)
        self.amount_tolerance = amount_tolerance

    def find_duplicate(self, key: DuplicateKey) -> Optional[Transaction]:
        """Return the first existing transaction matching ``key``, if any."""
        candidates = self.session.find_transactions(
            account_id=key.account_id,
            start_date=key.date - self.date_window,
            end_date=key.date + self.date_window,
            usage=key.usage,
            match_usage=True,
        )
        for candidate in candidates:
            if abs(candidate.amount - key.amount) < self.amount_tolerance:
                logger.debug("Duplicate of %s found: %s", key, candidate.uuid)
                return candidate
        return None

    def is_duplicate(self, key: DuplicateKey) -> bool:
        return self.find_duplicate(key) is not None
