"""Bank statement import domain service."""

import logging
import time
from decimal import Decimal
from pathlib import Path
from typing import Optional

from ledgerkit.config import LedgerSettings
from ledgerkit.database.base import Database, LedgerSession
from ledgerkit.domain.backup import BackupService
from ledgerkit.domain.classifier import Classifier, KeywordClassifier
from ledgerkit.domain.columns import ColumnMap, resolve_columns
from ledgerkit.domain.duplicates import DuplicateDetector, DuplicateKey
from ledgerkit.domain.entities import Account, Category, ImportResult, RecordInfo
from ledgerkit.domain.errors import (
    DomainError,
    OperationCancelled,
    UnresolvedReferenceError,
    ValidationError,
    account_not_found,
)
from ledgerkit.domain.transfers import PendingTransaction, TransferExpander, new_transaction_id
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.csv_reader import read_statement, split_row
from ledgerkit.utils.date_parser import format_statement_date, parse_statement_date
from ledgerkit.utils.text_cleaning import build_usage

logger = logging.getLogger(__name__)

# Rows between cooperative yields in the import loop
YIELD_EVERY = 200


class StatementImportService:
    """Service for importing bank statement CSV exports."""

    def __init__(
        self,
        db: Database,
        classifier: Optional[Classifier] = None,
        settings: Optional[LedgerSettings] = None,
        backup_service: Optional[BackupService] = None,
    ):
        """Initialize statement import service.

        Args:
            db: Database instance
            classifier: Category classifier; defaults to the keyword rules
            settings: Import settings; defaults to LedgerSettings()
            backup_service: Backup written after each successful import.
                None disables the automatic backup.
        """
        self.db = db
        self.classifier = classifier if classifier is not None else KeywordClassifier()
        self.settings = settings if settings is not None else LedgerSettings()
        self.backup_service = backup_service
        self.transfer_expander = TransferExpander(
            cash_markers=self.settings.cash_account_markers,
            checking_markers=self.settings.checking_account_markers,
        )

    def import_file(self, csv_file_path: Path | str, cancel_event=None) -> ImportResult:
        """Import transactions from a statement file.

        Args:
            csv_file_path: Path to a UTF-8 CSV export
            cancel_event: Optional object with ``is_set()``; checked between rows

        Returns:
            ImportResult with imported and skipped records and row errors

        Raises:
            FileNotFoundError: If the file doesn't exist
            ParseError: If the file is empty
            ValidationError: If required columns are missing
            OperationCancelled: If cancelled before the commit
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        text = csv_path.read_text(encoding="utf-8-sig")
        logger.info("Importing %s", csv_path)
        return self.import_text(text, cancel_event=cancel_event)

    def import_text(self, text: str, cancel_event=None) -> ImportResult:
        """Import transactions from statement text.

        All rows are written in one unit of work that is committed once at
        the end; per-row problems are collected in ``ImportResult.errors``.
        """
        table = read_statement(text)
        columns = resolve_columns(table.header)
        result = ImportResult()

        with self.db.unit_of_work() as session:
            detector = DuplicateDetector(
                session,
                date_window_days=self.settings.date_window_days,
                amount_tolerance=self.settings.amount_tolerance,
            )
            accounts = {a.name: a for a in session.list_accounts()}
            categories = {c.name: c for c in session.list_categories()}
            seen_lines: set[str] = set()

            for position, (row_num, line) in enumerate(table.rows, start=1):
                if cancel_event is not None and cancel_event.is_set():
                    raise OperationCancelled(f"Import cancelled at row {row_num}")
                if position % YIELD_EVERY == 0:
                    time.sleep(0)

                if line in seen_lines:
                    logger.info("Row %d repeats an earlier line, ignored", row_num)
                    continue
                seen_lines.add(line)

                try:
                    leg = self._build_leg(line, table.delimiter, columns, accounts)
                except DomainError as e:
                    message = f"Row {row_num}: {e}"
                    logger.warning("Skipping %s", message)
                    result.errors.append(message)
                    continue

                legs = self.transfer_expander.expand(leg)
                source = legs[0]
                info = RecordInfo(
                    date=format_statement_date(source.date),
                    amount=source.amount,
                    account=source.account.name,
                    usage=source.usage,
                    category=source.category,
                )
                key = DuplicateKey(
                    account_id=source.account.id,
                    date=source.date,
                    amount=source.amount,
                    usage=source.usage,
                )
                if detector.is_duplicate(key):
                    result.skipped.append(info)
                    continue

                for pending in legs:
                    self._write(session, pending, categories)
                result.imported.append(info)

            session.commit()

        logger.info(result.summary)
        self._backup()
        return result

    def _build_leg(
        self,
        line: str,
        delimiter: str,
        columns: ColumnMap,
        accounts: dict[str, Account],
    ) -> PendingTransaction:
        """Turn one data line into a pending transaction.

        Raises:
            ParseError: If the line cannot be split
            ValidationError: If the row is short or a field is invalid
            UnresolvedReferenceError: If the account or transfer target is unknown
        """
        fields = split_row(line, delimiter)
        if len(fields) <= columns.max_index:
            raise ValidationError(
                f"expected at least {columns.max_index + 1} fields, got {len(fields)}"
            )

        def cell(index: Optional[int]) -> str:
            return fields[index] if index is not None else ""

        try:
            txn_date = parse_statement_date(cell(columns.date))
        except ValueError as e:
            raise ValidationError(str(e)) from e

        try:
            amount = parse_amount(
                cell(columns.amount),
                decimal_separator=self.settings.decimal_separator,
                group_separator=self.settings.group_separator,
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if amount == 0:
            raise ValidationError("Amount must not be zero")

        raw_account = cell(columns.account)
        account_name = self.settings.account_aliases.get(raw_account, raw_account)
        account = accounts.get(account_name)
        if account is None:
            raise UnresolvedReferenceError(account_not_found(account_name))

        usage = build_usage(
            cell(columns.name), cell(columns.purpose), max_length=self.settings.usage_max_length
        )
        txn_type, category = self._classify(usage, amount, cell(columns.category))

        target = None
        if txn_type == "transfer":
            target_name = self.settings.transfer_routes[category]
            target = accounts.get(target_name)
            if target is None:
                raise UnresolvedReferenceError(f"Transfer target {account_not_found(target_name)}")
            if target.id == account.id:
                # Booked on the target account itself; nothing to mirror
                target = None

        return PendingTransaction(
            uuid=new_transaction_id(),
            account=account,
            category=category,
            type=txn_type,
            amount=amount,
            date=txn_date,
            usage=usage,
            target_account=target,
        )

    def _classify(self, usage: Optional[str], amount: Decimal, csv_category: str) -> tuple[str, str]:
        """Return (type, category) for a row.

        Order: classifier, then the statement's own category column, then
        the sign-based default.
        """
        category = self.classifier.classify(usage or "", amount) or csv_category
        if not category:
            if amount >= 0:
                return "income", self.settings.income_category
            return "expense", self.settings.default_category

        if category in self.settings.transfer_routes:
            return "transfer", category
        return ("income" if amount >= 0 else "expense"), category

    def _write(
        self, session: LedgerSession, pending: PendingTransaction, categories: dict[str, Category]
    ) -> None:
        name = pending.category or self.settings.default_category
        category = categories.get(name)
        if category is None:
            category = session.add_category(name)
            categories[name] = category
            logger.info("Created category '%s'", name)

        session.add_transaction(
            uuid=pending.uuid,
            account_id=pending.account.id,
            category_id=category.id,
            type=pending.type,
            amount=pending.amount,
            date=pending.date,
            usage=pending.usage,
            target_account_id=pending.target_account.id if pending.target_account else None,
        )

    def _backup(self) -> None:
        if self.backup_service is None:
            return
        try:
            self.backup_service.create_backup()
        except (OSError, DomainError) as e:
            logger.warning("Automatic backup after import failed: %s", e)
