"""Statement import configuration and pipeline value types."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from splitledger.domain.entities import (
    ResponsibilityAllocation,
    TransactionSource,
    TransactionSubtype,
    TransactionType,
    exceeds_cents,
)
from splitledger.domain.errors import ValidationError, allocation_sum_invalid, too_many_decimals
from splitledger.utils.date_parser import DEFAULT_DATE_PATTERNS


class ImportFormat(str, Enum):
    """Statement file format."""

    CSV = "CSV"
    AUTO = "AUTO"


class DuplicateStrategy(str, Enum):
    """What to do with an entry that matches an existing transaction."""

    SKIP = "SKIP"
    OVERWRITE = "OVERWRITE"
    CREATE_ANYWAY = "CREATE_ANYWAY"


class IssueReason(str, Enum):
    """Reason codes reported on import issues."""

    MALFORMED_ROW = "MALFORMED_ROW"
    MALFORMED_DATE = "MALFORMED_DATE"
    MALFORMED_AMOUNT = "MALFORMED_AMOUNT"
    IGNORED = "IGNORED"
    DUPLICATE_SKIPPED = "DUPLICATE_SKIPPED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_ALLOCATION = "INVALID_ALLOCATION"
    NOT_FOUND = "NOT_FOUND"


ColumnRef = Union[str, int]


@dataclass(frozen=True)
class CSVConfiguration:
    """How to read a CSV statement.

    With a header row the column roles are header names (matched
    case-insensitively); without one they are zero-based positions.
    """

    contains_header: bool = True
    delimiter: str = ";"
    date_column: ColumnRef = "date"
    description_column: ColumnRef = "description"
    amount_column: ColumnRef = "amount"
    locale: str = "pt-BR"
    date_patterns: tuple[str, ...] = DEFAULT_DATE_PATTERNS
    decimal_separator: Optional[str] = None
    grouping_separator: Optional[str] = None
    encoding: str = "utf-8-sig"

    def validate(self) -> None:
        """Raise ValidationError if the configuration cannot drive a parse."""
        if len(self.delimiter) != 1:
            raise ValidationError("Delimiter must be a single character")
        if not self.date_patterns:
            raise ValidationError("At least one date pattern must be provided")
        for separator in (self.decimal_separator, self.grouping_separator):
            if separator is not None and len(separator) != 1:
                raise ValidationError("Separators must be a single character")
        if not self.contains_header:
            for column in (self.date_column, self.description_column, self.amount_column):
                try:
                    if int(column) < 0:
                        raise ValueError(column)
                except (TypeError, ValueError):
                    raise ValidationError(
                        f"Column '{column}' must be a non-negative position when the CSV has no header"
                    )


@dataclass(frozen=True)
class ImportConfiguration:
    """Everything one statement import needs besides the file itself."""

    owner_id: int
    default_category_id: int
    default_subtype: TransactionSubtype
    default_source: TransactionSource
    responsibilities: tuple[ResponsibilityAllocation, ...] = ()
    format: ImportFormat = ImportFormat.AUTO
    csv: CSVConfiguration = field(default_factory=CSVConfiguration)
    duplicate_strategy: DuplicateStrategy = DuplicateStrategy.SKIP
    dry_run: bool = False
    ignore_descriptions: frozenset[str] = frozenset()
    default_subcategory_id: Optional[int] = None
    default_source_entity_id: Optional[int] = None
    default_type: Optional[TransactionType] = None
    duplicate_window_days: int = 3
    overwrite_replaces_allocations: bool = False

    def validate(self) -> None:
        """Validate settings that would fail every row alike.

        An empty responsibility template is left for per-row validation so
        each entry reports it.
        """
        self.csv.validate()
        if self.duplicate_window_days < 0:
            raise ValidationError("Duplicate window must not be negative")
        for r in self.responsibilities:
            if exceeds_cents(r.percentage):
                raise ValidationError(
                    too_many_decimals(f"Percentage for responsible {r.responsible_id}", r.percentage)
                )
        if self.responsibilities:
            total = sum((r.percentage for r in self.responsibilities), Decimal(0))
            if total != Decimal(100):
                raise ValidationError(allocation_sum_invalid(total))


@dataclass(frozen=True)
class NormalizedEntry:
    """A parsed statement row, before it becomes a transaction."""

    row_number: int
    date: date
    description: str
    amount: Decimal
    raw_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class ImportIssue:
    """A row that did not become a transaction, and why."""

    row: int
    reason: str
    message: str

    def to_dict(self) -> dict[str, object]:
        return {"row": self.row, "reason": self.reason, "message": self.message}
