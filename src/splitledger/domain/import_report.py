"""Summary of one statement import run."""

from dataclasses import dataclass, field
from typing import Any

from splitledger.domain.import_config import ImportIssue


@dataclass(frozen=True)
class ImportReport:
    """Per-row accountable outcome of an import.

    ``total_entries`` counts every successfully parsed row, ignored and
    duplicate ones included; malformed rows only appear as issues.
    ``created_transactions`` counts inserts that really happened, so it is
    always 0 for a dry run.
    """

    total_entries: int
    created_transactions: int
    duplicate_entries: int
    issues: tuple[ImportIssue, ...]
    dry_run: bool
    updated_transactions: int = 0
    created_transaction_ids: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalEntries": self.total_entries,
            "createdTransactions": self.created_transactions,
            "duplicateEntries": self.duplicate_entries,
            "updatedTransactions": self.updated_transactions,
            "issues": [issue.to_dict() for issue in self.issues],
            "dryRun": self.dry_run,
        }


@dataclass
class ImportReportBuilder:
    """Accumulates counters and issues while an import runs."""

    dry_run: bool
    total_entries: int = 0
    created_transactions: int = 0
    updated_transactions: int = 0
    duplicate_entries: int = 0
    issues: list[ImportIssue] = field(default_factory=list)
    created_transaction_ids: list[int] = field(default_factory=list)

    def entries_parsed(self, count: int) -> None:
        self.total_entries += count

    def add_issue(self, issue: ImportIssue) -> None:
        self.issues.append(issue)

    def add_issues(self, issues) -> None:
        self.issues.extend(issues)

    def duplicate_found(self) -> None:
        self.duplicate_entries += 1

    def transaction_created(self, transaction_id: int) -> None:
        self.created_transactions += 1
        self.created_transaction_ids.append(transaction_id)

    def transaction_updated(self) -> None:
        self.updated_transactions += 1

    def build(self) -> ImportReport:
        # sorted() is stable, so issues of one row keep their order
        ordered = sorted(self.issues, key=lambda issue: issue.row)
        return ImportReport(
            total_entries=self.total_entries,
            created_transactions=self.created_transactions,
            duplicate_entries=self.duplicate_entries,
            issues=tuple(ordered),
            dry_run=self.dry_run,
            updated_transactions=self.updated_transactions,
            created_transaction_ids=tuple(self.created_transaction_ids),
        )
