"""Statement import domain service."""

import logging
from pathlib import Path
from typing import Optional

from splitledger.database.base import Database
from splitledger.domain.csv_parser import CSVStatementParser
from splitledger.domain.duplicates import (
    DuplicateDetector,
    DuplicateResolver,
    ResolutionAction,
)
from splitledger.domain.entry_filter import filter_ignored
from splitledger.domain.errors import DomainError, ValidationError
from splitledger.domain.import_config import (
    ImportConfiguration,
    ImportFormat,
    ImportIssue,
    IssueReason,
)
from splitledger.domain.import_report import ImportReport, ImportReportBuilder
from splitledger.domain.notifications import NotificationDispatcher
from splitledger.domain.transaction import TransactionService
from splitledger.domain.transaction_builder import build_transaction_command

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = {".csv", ".txt"}


class StatementImportService:
    """Service for importing statement files."""

    def __init__(self, db: Database, notifier: Optional[NotificationDispatcher] = None):
        """Initialize statement import service.

        Args:
            db: Database instance
            notifier: Optional dispatcher passed on to the transaction service
        """
        self.db = db
        self.transaction_service = TransactionService(db, notifier)
        self.parser = CSVStatementParser()

    def import_file(self, path: str, config: ImportConfiguration) -> ImportReport:
        """Import a statement from disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the configuration or file layout is invalid
        """
        statement_path = Path(path)
        if not statement_path.exists():
            raise FileNotFoundError(f"Statement file not found: {path}")
        return self.import_statement(
            statement_path.read_bytes(), config, filename=statement_path.name
        )

    def import_statement(
        self,
        content: bytes,
        config: ImportConfiguration,
        filename: Optional[str] = None,
    ) -> ImportReport:
        """Import transactions from statement content.

        Rows are processed one at a time in file order, so duplicate checks
        see the writes of earlier rows. Problems with a single row never
        abort the batch; they are reported as issues.

        Args:
            content: Raw statement bytes
            config: Import configuration
            filename: Optional original file name, used to detect the format

        Returns:
            ImportReport for the run

        Raises:
            ValidationError: If the configuration is invalid, the format cannot
                be detected, or the header lacks a configured column
        """
        config.validate()
        resolved = self.resolve_format(content, config, filename)
        if resolved is not ImportFormat.CSV:
            raise ValidationError(f"Unsupported import format: {resolved.value}")

        parsed = self.parser.parse(content, config.csv)
        report = ImportReportBuilder(dry_run=config.dry_run)
        report.entries_parsed(len(parsed.entries))
        report.add_issues(parsed.issues)

        entries, ignored = filter_ignored(parsed.entries, config.ignore_descriptions)
        report.add_issues(ignored)

        detector = DuplicateDetector(self.db, window_days=config.duplicate_window_days)
        resolver = DuplicateResolver(self.transaction_service)

        for entry in entries:
            try:
                command = build_transaction_command(entry, config)
                classification = detector.classify(config.owner_id, entry)
                if classification.is_duplicate:
                    report.duplicate_found()

                resolution = resolver.resolve(classification, command, config)
            except DomainError as e:
                logger.debug("Failed to import row %d: %s", entry.row_number, e)
                report.add_issue(ImportIssue(row=entry.row_number, reason=e.code, message=str(e)))
                continue

            if resolution.action is ResolutionAction.SKIPPED:
                matched = ", ".join(str(i) for i in classification.matched_ids)
                message = (
                    f"Skipped duplicate of transaction(s) {matched}"
                    if matched
                    else "Skipped duplicate of an earlier row in this file"
                )
                report.add_issue(
                    ImportIssue(
                        row=entry.row_number,
                        reason=IssueReason.DUPLICATE_SKIPPED.value,
                        message=message,
                    )
                )
                continue

            if config.dry_run:
                detector.stage(entry)
            elif resolution.action is ResolutionAction.CREATED:
                report.transaction_created(resolution.transaction.id)
            else:
                report.transaction_updated()

        result = report.build()
        logger.info(
            "Imported statement for owner %s: %d entries, %d created, %d duplicates, %d issues%s",
            config.owner_id,
            result.total_entries,
            result.created_transactions,
            result.duplicate_entries,
            len(result.issues),
            " (dry run)" if result.dry_run else "",
        )
        return result

    @staticmethod
    def resolve_format(
        content: bytes, config: ImportConfiguration, filename: Optional[str] = None
    ) -> ImportFormat:
        """Pick the concrete format for AUTO.

        The file extension decides when known, otherwise the content is
        treated as CSV if its first line contains the configured delimiter.

        Raises:
            ValidationError: If the format cannot be detected
        """
        if config.format is not ImportFormat.AUTO:
            return config.format
        if filename and Path(filename).suffix.lower() in CSV_EXTENSIONS:
            return ImportFormat.CSV

        try:
            first_line = content.decode(config.csv.encoding).lstrip().splitlines()[:1]
        except (UnicodeDecodeError, LookupError):
            first_line = []
        if first_line and config.csv.delimiter in first_line[0]:
            return ImportFormat.CSV
        raise ValidationError("Unable to detect statement format from file name or content")
