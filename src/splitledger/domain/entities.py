"""Domain model entities for splitledger.

These are pure data classes representing business concepts, independent of
database schema. Persistence code converts to and from them through the
explicit functions in ``splitledger.database.mappers``.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


CENTS = Decimal("0.01")


def exceeds_cents(value: Decimal) -> bool:
    """True when ``value`` has digits below the second decimal place.

    Amounts and percentages are stored with two decimal places, so such a
    value would be rounded on write.
    """
    return value != value.quantize(CENTS)


class TransactionType(str, Enum):
    """Direction of a money movement."""

    EXPENSE = "EXPENSE"
    INCOME = "INCOME"


class TransactionSubtype(str, Enum):
    """Whether a transaction recurs with a fixed value."""

    FIXED = "FIXED"
    VARIABLE = "VARIABLE"


class TransactionSource(str, Enum):
    """Payment instrument a transaction went through."""

    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_TRANSACTION = "BANK_TRANSACTION"
    OTHER = "OTHER"


@dataclass(frozen=True)
class User:
    """Owner of transactions."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Transaction category."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Subcategory:
    """Transaction subcategory, always under a category."""

    id: int
    name: str
    category_id: int
    created_at: datetime


@dataclass(frozen=True)
class SourceEntity:
    """Bank, card or wallet a transaction was paid from."""

    id: int
    name: str
    owner_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Responsible:
    """Party that can be held responsible for a share of a transaction."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class ResponsibilityAllocation:
    """Percentage of a transaction attributed to one responsible."""

    responsible_id: int
    percentage: Decimal
    notes: Optional[str] = None

    def amount_of(self, total: Decimal) -> Decimal:
        """Share of ``total`` covered by this allocation, rounded to cents."""
        return (total * self.percentage / Decimal(100)).quantize(CENTS)


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    owner_id: int
    type: TransactionType
    subtype: TransactionSubtype
    source: TransactionSource
    description: str
    amount: Decimal
    date: date
    category_id: int
    subcategory_id: Optional[int]
    source_entity_id: Optional[int]
    responsibilities: tuple[ResponsibilityAllocation, ...]
    reconciled_amount: Optional[Decimal] = None
    reconciliation_date: Optional[datetime] = None
    reconciled: Optional[bool] = False
    reconciliation_notes: Optional[str] = None
    bank_reference: Optional[str] = None
    external_reference: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def total_percentage(self) -> Decimal:
        return sum((r.percentage for r in self.responsibilities), Decimal(0))


@dataclass(frozen=True)
class TransactionCommand:
    """Payload for creating or fully updating a transaction."""

    owner_id: int
    type: TransactionType
    subtype: TransactionSubtype
    source: TransactionSource
    description: str
    amount: Decimal
    date: date
    category_id: int
    subcategory_id: Optional[int] = None
    source_entity_id: Optional[int] = None
    responsibilities: tuple[ResponsibilityAllocation, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ReconciliationRecord:
    """Authoritative external record a transaction is reconciled against.

    Every field is written verbatim; None clears the stored value. An aware
    ``reconciliation_date`` is stored as naive UTC.
    """

    reconciled_amount: Optional[Decimal] = None
    reconciliation_date: Optional[datetime] = None
    reconciled: Optional[bool] = None
    reconciliation_notes: Optional[str] = None
    bank_reference: Optional[str] = None
    external_reference: Optional[str] = None


@dataclass(frozen=True)
class TransactionFilter:
    """Criteria for listing transactions, one optional field per dimension."""

    owner_id: int
    type: Optional[TransactionType] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    source_entity_id: Optional[int] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reconciled: Optional[bool] = None
