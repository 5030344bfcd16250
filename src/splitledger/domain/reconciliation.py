"""Reconciliation of persisted transactions against external records."""

from dataclasses import replace
from datetime import UTC
from enum import Enum

from splitledger.domain.entities import ReconciliationRecord, Transaction


class ReconciliationState(str, Enum):
    """Whether a transaction has been matched against an external record."""

    UNRECONCILED = "UNRECONCILED"
    RECONCILED = "RECONCILED"

    @classmethod
    def of(cls, transaction: Transaction) -> "ReconciliationState":
        """State of a transaction; only an explicit True counts as reconciled."""
        return cls.RECONCILED if transaction.reconciled is True else cls.UNRECONCILED


def record_of(transaction: Transaction) -> ReconciliationRecord:
    """Reconciliation fields currently stored on a transaction."""
    return ReconciliationRecord(
        reconciled_amount=transaction.reconciled_amount,
        reconciliation_date=transaction.reconciliation_date,
        reconciled=transaction.reconciled,
        reconciliation_notes=transaction.reconciliation_notes,
        bank_reference=transaction.bank_reference,
        external_reference=transaction.external_reference,
    )


def normalize_record(record: ReconciliationRecord) -> ReconciliationRecord:
    """Return ``record`` in the form it is stored in.

    Timestamps are kept as naive UTC, so an aware reconciliation date is
    converted to UTC and its tzinfo dropped. Naive dates are taken as given.
    """
    moment = record.reconciliation_date
    if moment is None or moment.tzinfo is None:
        return record
    return replace(record, reconciliation_date=moment.astimezone(UTC).replace(tzinfo=None))


def describe_transition(before: Transaction, after: Transaction) -> str:
    """Human readable state change, e.g. "UNRECONCILED -> RECONCILED"."""
    return f"{ReconciliationState.of(before).value} -> {ReconciliationState.of(after).value}"
