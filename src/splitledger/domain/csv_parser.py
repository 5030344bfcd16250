"""CSV statement parser.

Turns raw statement bytes into ordered ``NormalizedEntry`` objects. Rows that
cannot be read become ``ImportIssue`` records instead of aborting the batch.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Optional

from splitledger.domain.errors import ParseError, ValidationError, column_not_in_header
from splitledger.domain.import_config import (
    CSVConfiguration,
    ColumnRef,
    ImportIssue,
    IssueReason,
    NormalizedEntry,
)
from splitledger.utils.amount_parser import parse_amount
from splitledger.utils.date_parser import parse_statement_date

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Entries and row issues produced by one parse."""

    entries: list[NormalizedEntry] = field(default_factory=list)
    issues: list[ImportIssue] = field(default_factory=list)


@dataclass(frozen=True)
class _ColumnLayout:
    date: int
    description: int
    amount: int

    @property
    def width(self) -> int:
        return max(self.date, self.description, self.amount) + 1


class CSVStatementParser:
    """Parser for CSV statement exports."""

    def parse(self, content: bytes, config: CSVConfiguration) -> ParseResult:
        """Parse statement content.

        Args:
            content: Raw file bytes
            config: CSV configuration (delimiter, columns, locale, date patterns)

        Returns:
            ParseResult with entries in file order and per-row issues

        Raises:
            ValidationError: If the content cannot be decoded, or a configured
                column is missing from the header
        """
        config.validate()
        try:
            text = content.decode(config.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise ValidationError(f"Unable to decode statement as {config.encoding}: {e}")

        reader = csv.reader(
            io.StringIO(text, newline=""),
            delimiter=config.delimiter,
            skipinitialspace=True,
        )
        rows = (row for row in reader if not _is_blank(row))

        result = ParseResult()
        layout: Optional[_ColumnLayout] = None
        if config.contains_header:
            header = next(rows, None)
            if header is None:
                return result
            layout = _layout_from_header(header, config)
        else:
            layout = _ColumnLayout(
                date=int(config.date_column),
                description=int(config.description_column),
                amount=int(config.amount_column),
            )

        for row_number, row in enumerate(rows, start=1):
            try:
                result.entries.append(self._parse_row(row_number, row, layout, config))
            except ParseError as e:
                logger.debug("Row %d rejected: %s", row_number, e)
                result.issues.append(ImportIssue(row=row_number, reason=e.code, message=str(e)))

        return result

    def _parse_row(
        self,
        row_number: int,
        row: list[str],
        layout: _ColumnLayout,
        config: CSVConfiguration,
    ) -> NormalizedEntry:
        if len(row) < layout.width:
            raise ParseError(
                f"Expected at least {layout.width} columns, found {len(row)}",
                IssueReason.MALFORMED_ROW.value,
            )

        try:
            entry_date = parse_statement_date(row[layout.date], config.date_patterns)
        except ValueError as e:
            raise ParseError(str(e), IssueReason.MALFORMED_DATE.value)

        try:
            amount = parse_amount(
                row[layout.amount],
                locale=config.locale,
                decimal_separator=config.decimal_separator,
                grouping_separator=config.grouping_separator,
            )
        except ValueError as e:
            raise ParseError(str(e), IssueReason.MALFORMED_AMOUNT.value)

        return NormalizedEntry(
            row_number=row_number,
            date=entry_date,
            description=row[layout.description].strip(),
            amount=amount,
            raw_fields=tuple(row),
        )


def _is_blank(row: list[str]) -> bool:
    return not row or all(not cell.strip() for cell in row)


def _normalize_key(value: ColumnRef) -> str:
    return str(value).strip().lower()


def _layout_from_header(header: list[str], config: CSVConfiguration) -> _ColumnLayout:
    lookup: dict[str, int] = {}
    for index, name in enumerate(header):
        lookup.setdefault(_normalize_key(name), index)

    def resolve(role: str, column: ColumnRef) -> int:
        index = lookup.get(_normalize_key(column))
        if index is None:
            raise ValidationError(column_not_in_header(role, str(column)))
        return index

    return _ColumnLayout(
        date=resolve("date", config.date_column),
        description=resolve("description", config.description_column),
        amount=resolve("amount", config.amount_column),
    )
