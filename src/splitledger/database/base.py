"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from splitledger.domain.entities import (
    Category,
    ReconciliationRecord,
    Responsible,
    SourceEntity,
    Subcategory,
    Transaction,
    TransactionCommand,
    TransactionFilter,
    User,
)


class Database(ABC):
    """Abstract database interface for splitledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Reference entities
    @abstractmethod
    def create_user(self, name: str) -> int:
        """Create an owner. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get owner by ID."""
        pass

    @abstractmethod
    def create_category(self, name: str) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def create_subcategory(self, name: str, category_id: int) -> int:
        """Create a subcategory under a category. Returns subcategory ID."""
        pass

    @abstractmethod
    def get_subcategory(self, subcategory_id: int) -> Optional[Subcategory]:
        """Get subcategory by ID."""
        pass

    @abstractmethod
    def create_source_entity(self, name: str, owner_id: Optional[int] = None) -> int:
        """Create a source entity (bank, card, wallet). Returns its ID."""
        pass

    @abstractmethod
    def get_source_entity(self, source_entity_id: int) -> Optional[SourceEntity]:
        """Get source entity by ID."""
        pass

    @abstractmethod
    def create_responsible(self, name: str) -> int:
        """Create a responsible party. Returns its ID."""
        pass

    @abstractmethod
    def get_responsible(self, responsible_id: int) -> Optional[Responsible]:
        """Get responsible party by ID."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(self, command: TransactionCommand) -> int:
        """Insert a transaction with its allocations. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, command: TransactionCommand) -> None:
        """Replace a transaction's fields and allocations.

        Reconciliation fields are left untouched.
        """
        pass

    @abstractmethod
    def save_reconciliation(self, transaction_id: int, record: ReconciliationRecord) -> None:
        """Overwrite the reconciliation fields of a transaction."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction and its allocations."""
        pass

    @abstractmethod
    def find_potential_duplicates(
        self,
        owner_id: int,
        amount: Decimal,
        description: str,
        start_date: date,
        end_date: date,
    ) -> list[Transaction]:
        """Find the owner's transactions with this exact amount, the same
        description (case-insensitive) and a date within [start_date, end_date].

        Results are ordered by ID.
        """
        pass

    @abstractmethod
    def list_transactions(
        self,
        criteria: TransactionFilter,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """List transactions matching the filter, newest first."""
        pass

    @abstractmethod
    def count_transactions(self, criteria: TransactionFilter) -> int:
        """Count transactions matching the filter."""
        pass
