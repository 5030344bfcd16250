"""Transaction domain service."""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from splitledger.database.base import Database
from splitledger.domain.entities import (
    ReconciliationRecord,
    Transaction as TransactionEntity,
    TransactionCommand,
    TransactionFilter,
    exceeds_cents,
)
from splitledger.domain.errors import (
    InvalidAllocationError,
    MissingReferenceError,
    NotFoundError,
    ValidationError,
    allocation_sum_invalid,
    duplicate_responsible,
    too_many_decimals,
)
from splitledger.domain.notifications import NotificationDispatcher
from splitledger.domain.reconciliation import describe_transition, normalize_record

logger = logging.getLogger(__name__)

ONE_HUNDRED = Decimal(100)


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database, notifier: Optional[NotificationDispatcher] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            notifier: Optional dispatcher for post-write observers and metrics
        """
        self.db = db
        self.notifier = notifier or NotificationDispatcher()

    def validate(self, command: TransactionCommand) -> None:
        """Check every reference and invariant of a create/update command.

        Nothing is written. Lookups run first so a missing entity is reported
        even when the amounts are also wrong.

        Raises:
            MissingReferenceError: If the owner, category, subcategory, source
                entity or a responsible does not exist
            InvalidAllocationError: If allocations are empty, repeated, out of
                range or do not sum to exactly 100
            ValidationError: If amount or description are invalid
        """
        if self.db.get_user(command.owner_id) is None:
            raise MissingReferenceError("User", command.owner_id)
        if self.db.get_category(command.category_id) is None:
            raise MissingReferenceError("Category", command.category_id)
        if command.subcategory_id is not None:
            subcategory = self.db.get_subcategory(command.subcategory_id)
            if subcategory is None:
                raise MissingReferenceError("Subcategory", command.subcategory_id)
            if subcategory.category_id != command.category_id:
                raise ValidationError(
                    f"Subcategory {command.subcategory_id} does not belong to "
                    f"category {command.category_id}"
                )
        if command.source_entity_id is not None:
            if self.db.get_source_entity(command.source_entity_id) is None:
                raise MissingReferenceError("SourceEntity", command.source_entity_id)
        for allocation in command.responsibilities:
            if self.db.get_responsible(allocation.responsible_id) is None:
                raise MissingReferenceError("Responsible", allocation.responsible_id)

        if command.amount is None or command.amount <= 0:
            raise ValidationError(f"Amount must be greater than zero, got {command.amount}")
        if exceeds_cents(command.amount):
            raise ValidationError(too_many_decimals("Amount", command.amount))
        if not command.description or not command.description.strip():
            raise ValidationError("Description cannot be blank")

        self._validate_allocations(command)

    @staticmethod
    def _validate_allocations(command: TransactionCommand) -> None:
        if not command.responsibilities:
            raise InvalidAllocationError("At least one responsibility allocation is required")

        seen: set[int] = set()
        total = Decimal(0)
        for allocation in command.responsibilities:
            if allocation.responsible_id in seen:
                raise InvalidAllocationError(duplicate_responsible(allocation.responsible_id))
            seen.add(allocation.responsible_id)
            if allocation.percentage <= 0 or allocation.percentage > ONE_HUNDRED:
                raise InvalidAllocationError(
                    f"Percentage for responsible {allocation.responsible_id} must be "
                    f"between 0 and 100, got {allocation.percentage}"
                )
            if exceeds_cents(allocation.percentage):
                raise InvalidAllocationError(
                    too_many_decimals(
                        f"Percentage for responsible {allocation.responsible_id}",
                        allocation.percentage,
                    )
                )
            total += allocation.percentage

        if total != ONE_HUNDRED:
            raise InvalidAllocationError(allocation_sum_invalid(total))

    def create(self, command: TransactionCommand) -> TransactionEntity:
        """Validate and persist a new transaction.

        Returns:
            The stored transaction, with its assigned ID

        Raises:
            ValidationError: If the command is invalid (nothing is written)
        """
        self.validate(command)
        transaction_id = self.db.create_transaction(command)
        stored = self._require(command.owner_id, transaction_id)
        logger.debug("Created transaction %s for owner %s", transaction_id, command.owner_id)
        self.notifier.transaction_changed(stored, "created")
        return stored

    def get_transaction(self, owner_id: int, transaction_id: int) -> Optional[TransactionEntity]:
        """Get an owner's transaction by ID.

        Returns:
            Transaction entity or None if not found or owned by someone else
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None or txn.owner_id != owner_id:
            return None
        return txn

    def _require(self, owner_id: int, transaction_id: int) -> TransactionEntity:
        txn = self.get_transaction(owner_id, transaction_id)
        if txn is None:
            raise NotFoundError("Transaction", transaction_id)
        return txn

    def update(
        self, owner_id: int, transaction_id: int, command: TransactionCommand
    ) -> TransactionEntity:
        """Replace a transaction's fields and allocations.

        Raises:
            NotFoundError: If the transaction doesn't exist for this owner
            ValidationError: If the command is invalid
        """
        self._require(owner_id, transaction_id)
        if command.owner_id != owner_id:
            raise ValidationError("A transaction cannot be moved to another owner")
        self.validate(command)
        self.db.update_transaction(transaction_id, command)
        stored = self._require(owner_id, transaction_id)
        self.notifier.transaction_changed(stored, "updated")
        return stored

    def overwrite_command(
        self,
        owner_id: int,
        transaction_id: int,
        command: TransactionCommand,
        replace_allocations: bool = False,
    ) -> TransactionCommand:
        """Command that overwriting ``transaction_id`` with ``command`` would write.

        Amount, description, date and type always come from ``command``. The
        existing categorization and allocations are kept unless
        ``replace_allocations`` is set, in which case the whole command wins.

        Raises:
            NotFoundError: If the transaction doesn't exist for this owner
        """
        existing = self._require(owner_id, transaction_id)
        if replace_allocations:
            return command
        return replace(
            command,
            subtype=existing.subtype,
            source=existing.source,
            category_id=existing.category_id,
            subcategory_id=existing.subcategory_id,
            source_entity_id=existing.source_entity_id,
            responsibilities=existing.responsibilities,
        )

    def overwrite(
        self,
        owner_id: int,
        transaction_id: int,
        command: TransactionCommand,
        replace_allocations: bool = False,
    ) -> TransactionEntity:
        """Overwrite a transaction in place with a statement entry's values."""
        merged = self.overwrite_command(owner_id, transaction_id, command, replace_allocations)
        return self.update(owner_id, transaction_id, merged)

    def delete(self, owner_id: int, transaction_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist for this owner
        """
        txn = self._require(owner_id, transaction_id)
        self.db.delete_transaction(transaction_id)
        self.notifier.transaction_changed(txn, "deleted")

    def reconcile(
        self, owner_id: int, transaction_id: int, record: ReconciliationRecord
    ) -> TransactionEntity:
        """Overwrite the reconciliation fields of a transaction.

        An aware reconciliation date is stored as naive UTC.

        Raises:
            NotFoundError: If the transaction doesn't exist for this owner
            ValidationError: If the reconciled amount has more than 2 decimal places
        """
        before = self._require(owner_id, transaction_id)
        amount = record.reconciled_amount
        if amount is not None and exceeds_cents(amount):
            raise ValidationError(too_many_decimals("Reconciled amount", amount))

        self.db.save_reconciliation(transaction_id, normalize_record(record))
        stored = self._require(owner_id, transaction_id)
        logger.info(
            "Transaction %s reconciled (%s)", transaction_id, describe_transition(before, stored)
        )
        self.notifier.transaction_changed(stored, "updated")
        return stored

    def list_transactions(
        self,
        criteria: TransactionFilter,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[TransactionEntity]:
        """List transactions with filters, newest first."""
        return self.db.list_transactions(criteria, limit=limit, offset=offset)

    def count_transactions(self, criteria: TransactionFilter) -> int:
        """Count transactions matching the filters."""
        return self.db.count_transactions(criteria)
