"""Creation of mirrored counter-legs for inter-account transfers."""

import logging
import uuid as uuid_module
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerkit.domain.entities import Account

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingTransaction:
    """A transaction that has been built but not yet written."""

    uuid: str
    account: Account
    category: str
    type: str
    amount: Decimal
    date: date
    usage: Optional[str] = None
    target_account: Optional[Account] = None


def new_transaction_id() -> str:
    return str(uuid_module.uuid4())


class TransferExpander:
    """Mirrors a transfer leg onto its target account.

    The one exception: a transfer from the cash account into the checking
    account is not mirrored, because both sides show up as separate lines
    in the same export. Accounts are identified by case-insensitive
    substring markers on their names.
    """

    def __init__(
        self,
        cash_markers: tuple[str, ...] = ("cash", "bargeld"),
        checking_markers: tuple[str, ...] = ("checking", "giro"),
    ):
        self.cash_markers = tuple(m.lower() for m in cash_markers)
        self.checking_markers = tuple(m.lower() for m in checking_markers)

    def _matches(self, account: Account, markers: tuple[str, ...]) -> bool:
        name = account.name.lower()
        return any(marker in name for marker in markers)

    def is_suppressed(self, source: Account, target: Account) -> bool:
        """True for the cash -> checking pair that must not be mirrored."""
        return self._matches(source, self.cash_markers) and self._matches(target, self.checking_markers)

    def expand(self, leg: PendingTransaction) -> list[PendingTransaction]:
        """Return the legs to write for ``leg``.

        Non-transfers come back unchanged. A transfer's source leg always
        carries the negative amount; unless the pair is suppressed it gets
        a counter-leg with the positive amount and the account roles
        swapped.
        """
        if leg.type != "transfer" or leg.target_account is None:
            return [leg]

        source_leg = replace(leg, amount=-abs(leg.amount))
        if self.is_suppressed(leg.account, leg.target_account):
            logger.debug(
                "Not mirroring transfer %s -> %s", leg.account.name, leg.target_account.name
            )
            return [source_leg]

        counter_leg = replace(
            source_leg,
            uuid=new_transaction_id(),
            account=leg.target_account,
            target_account=leg.account,
            amount=abs(leg.amount),
        )
        return [source_leg, counter_leg]
