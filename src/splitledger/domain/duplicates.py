"""Duplicate detection and duplicate policy for statement imports."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from splitledger.database.base import Database
from splitledger.domain.entities import Transaction, TransactionCommand
from splitledger.domain.entry_filter import normalize_description
from splitledger.domain.import_config import (
    DuplicateStrategy,
    ImportConfiguration,
    NormalizedEntry,
)
from splitledger.domain.transaction import TransactionService

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 3


class DuplicateStatus(str, Enum):
    NEW = "NEW"
    DUPLICATE = "DUPLICATE"


@dataclass(frozen=True)
class DuplicateClassification:
    """Outcome of checking one entry against recorded transactions.

    ``matched_ids`` is empty when the match is an earlier row of the same
    dry run, which has no stored counterpart.
    """

    status: DuplicateStatus
    matched_ids: tuple[int, ...] = ()

    @property
    def is_duplicate(self) -> bool:
        return self.status is DuplicateStatus.DUPLICATE


class DuplicateDetector:
    """Classifies entries as NEW or DUPLICATE.

    An entry duplicates an owner's transaction when the absolute amounts are
    equal, the descriptions are equal ignoring case and surrounding spaces,
    and the dates are at most ``window_days`` apart.
    """

    def __init__(self, db: Database, window_days: int = DEFAULT_WINDOW_DAYS):
        self.db = db
        self.window = timedelta(days=window_days)
        self._staged: list[tuple[Decimal, str, date]] = []

    def classify(self, owner_id: int, entry: NormalizedEntry) -> DuplicateClassification:
        amount = abs(entry.amount)
        matches = self.db.find_potential_duplicates(
            owner_id=owner_id,
            amount=amount,
            description=entry.description,
            start_date=entry.date - self.window,
            end_date=entry.date + self.window,
        )
        if matches:
            return DuplicateClassification(
                DuplicateStatus.DUPLICATE, tuple(txn.id for txn in matches)
            )
        if self._matches_staged(amount, entry):
            return DuplicateClassification(DuplicateStatus.DUPLICATE)
        return DuplicateClassification(DuplicateStatus.NEW)

    def stage(self, entry: NormalizedEntry) -> None:
        """Remember an entry a dry run would have written."""
        self._staged.append(
            (abs(entry.amount), normalize_description(entry.description), entry.date)
        )

    def _matches_staged(self, amount: Decimal, entry: NormalizedEntry) -> bool:
        key = normalize_description(entry.description)
        return any(
            staged_amount == amount
            and staged_key == key
            and abs(staged_date - entry.date) <= self.window
            for staged_amount, staged_key, staged_date in self._staged
        )


class ResolutionAction(str, Enum):
    CREATED = "CREATED"
    OVERWRITTEN = "OVERWRITTEN"
    SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class Resolution:
    """What happened to one entry. ``transaction`` is None when nothing was written."""

    action: ResolutionAction
    transaction: Optional[Transaction] = None

    @property
    def written(self) -> bool:
        return self.transaction is not None


class DuplicateResolver:
    """Applies the configured duplicate strategy and performs the write.

    NEW entries are always created. In a dry run every command is still
    validated but nothing is written.
    """

    def __init__(self, transaction_service: TransactionService):
        self.transaction_service = transaction_service

    def resolve(
        self,
        classification: DuplicateClassification,
        command: TransactionCommand,
        config: ImportConfiguration,
    ) -> Resolution:
        strategy = config.duplicate_strategy
        if classification.is_duplicate and strategy is DuplicateStrategy.SKIP:
            return Resolution(ResolutionAction.SKIPPED)

        if classification.is_duplicate and strategy is DuplicateStrategy.OVERWRITE:
            return self._overwrite(classification, command, config)

        self.transaction_service.validate(command)
        if config.dry_run:
            return Resolution(ResolutionAction.CREATED)
        return Resolution(ResolutionAction.CREATED, self.transaction_service.create(command))

    def _overwrite(
        self,
        classification: DuplicateClassification,
        command: TransactionCommand,
        config: ImportConfiguration,
    ) -> Resolution:
        if not classification.matched_ids:
            # Matched an earlier row of this dry run
            self.transaction_service.validate(command)
            return Resolution(ResolutionAction.OVERWRITTEN)

        target_id = classification.matched_ids[0]
        if config.dry_run:
            self.transaction_service.validate(
                self.transaction_service.overwrite_command(
                    config.owner_id, target_id, command, config.overwrite_replaces_allocations
                )
            )
            return Resolution(ResolutionAction.OVERWRITTEN)

        logger.debug("Overwriting transaction %s with statement values", target_id)
        updated = self.transaction_service.overwrite(
            owner_id=config.owner_id,
            transaction_id=target_id,
            command=command,
            replace_allocations=config.overwrite_replaces_allocations,
        )
        return Resolution(ResolutionAction.OVERWRITTEN, updated)
