"""Tests for database mappers."""

import pytest
from datetime import datetime, date, UTC
from decimal import Decimal

from splitledger.database.models import (
    Responsible as ORMResponsible,
    SourceEntity as ORMSourceEntity,
    Subcategory as ORMSubcategory,
    Transaction as ORMTransaction,
    TransactionResponsibility as ORMTransactionResponsibility,
    User as ORMUser,
)
from splitledger.database.mappers import (
    allocation_to_orm,
    apply_command,
    apply_reconciliation,
    responsible_to_domain,
    source_entity_to_domain,
    subcategory_to_domain,
    transaction_to_domain,
    user_to_domain,
)
from splitledger.domain.entities import (
    ReconciliationRecord,
    ResponsibilityAllocation,
    Subcategory,
    Transaction,
    TransactionCommand,
    TransactionSource,
    TransactionSubtype,
    TransactionType,
    User,
)


def _orm_transaction():
    now = datetime.now(UTC)
    return ORMTransaction(
        id=7,
        owner_id=1,
        type=TransactionType.EXPENSE,
        subtype=TransactionSubtype.FIXED,
        source=TransactionSource.CREDIT_CARD,
        description="Rent",
        amount=Decimal("1500.00"),
        date=date(2024, 1, 5),
        category_id=2,
        subcategory_id=None,
        source_entity_id=3,
        reconciled=True,
        reconciled_amount=Decimal("1500.00"),
        bank_reference="BR-1",
        created_at=now,
        updated_at=now,
        responsibilities=[
            ORMTransactionResponsibility(responsible_id=4, percentage=Decimal("70"), position=0),
            ORMTransactionResponsibility(
                responsible_id=5, percentage=Decimal("30"), notes="parking", position=1
            ),
        ],
    )


class TestReferenceMappers:
    """Tests for reference entity mappers."""

    def test_user_to_domain(self):
        orm_user = ORMUser(id=1, name="Ana", created_at=datetime.now(UTC))

        user = user_to_domain(orm_user)

        assert isinstance(user, User)
        assert (user.id, user.name, user.created_at) == (1, "Ana", orm_user.created_at)

    def test_subcategory_to_domain(self):
        orm_sub = ORMSubcategory(id=3, name="Supermarket", category_id=2, created_at=datetime.now(UTC))

        sub = subcategory_to_domain(orm_sub)

        assert isinstance(sub, Subcategory)
        assert sub.category_id == 2

    def test_source_entity_without_owner(self):
        orm_source = ORMSourceEntity(id=1, name="Cash", owner_id=None, created_at=datetime.now(UTC))

        assert source_entity_to_domain(orm_source).owner_id is None

    def test_responsible_to_domain(self):
        orm_responsible = ORMResponsible(id=4, name="Alice", created_at=datetime.now(UTC))

        assert responsible_to_domain(orm_responsible).name == "Alice"


class TestTransactionMapper:
    """Tests for Transaction mapper."""

    def test_transaction_to_domain(self):
        orm_txn = _orm_transaction()

        txn = transaction_to_domain(orm_txn)

        assert isinstance(txn, Transaction)
        assert txn.id == 7
        assert txn.type == TransactionType.EXPENSE
        assert txn.amount == Decimal("1500.00")
        assert txn.source_entity_id == 3
        assert txn.responsibilities == (
            ResponsibilityAllocation(4, Decimal("70")),
            ResponsibilityAllocation(5, Decimal("30"), "parking"),
        )
        assert txn.reconciled is True
        assert txn.bank_reference == "BR-1"
        assert txn.external_reference is None

    def test_apply_command_replaces_allocations(self):
        orm_txn = _orm_transaction()
        command = TransactionCommand(
            owner_id=1,
            type=TransactionType.INCOME,
            subtype=TransactionSubtype.VARIABLE,
            source=TransactionSource.BANK_TRANSACTION,
            description="Refund",
            amount=Decimal("20.00"),
            date=date(2024, 2, 1),
            category_id=2,
            responsibilities=(ResponsibilityAllocation(5, Decimal("100")),),
        )

        apply_command(orm_txn, command)

        assert orm_txn.description == "Refund"
        assert orm_txn.type == TransactionType.INCOME
        assert orm_txn.source_entity_id is None
        assert [(r.responsible_id, r.position) for r in orm_txn.responsibilities] == [(5, 0)]

    def test_apply_command_leaves_reconciliation(self):
        orm_txn = _orm_transaction()
        command = TransactionCommand(
            owner_id=1,
            type=TransactionType.EXPENSE,
            subtype=TransactionSubtype.FIXED,
            source=TransactionSource.CASH,
            description="Rent",
            amount=Decimal("1500.00"),
            date=date(2024, 1, 5),
            category_id=2,
            responsibilities=(ResponsibilityAllocation(4, Decimal("100")),),
        )

        apply_command(orm_txn, command)

        assert orm_txn.reconciled is True
        assert orm_txn.bank_reference == "BR-1"

    def test_apply_reconciliation_copies_none(self):
        orm_txn = _orm_transaction()

        apply_reconciliation(orm_txn, ReconciliationRecord(reconciliation_notes="checked"))

        assert orm_txn.reconciled is None
        assert orm_txn.reconciled_amount is None
        assert orm_txn.bank_reference is None
        assert orm_txn.reconciliation_notes == "checked"
        assert orm_txn.amount == Decimal("1500.00")

    @pytest.mark.parametrize("position", [0, 3])
    def test_allocation_to_orm(self, position):
        row = allocation_to_orm(ResponsibilityAllocation(4, Decimal("25.5"), "fuel"), position)

        assert row.responsible_id == 4
        assert row.percentage == Decimal("25.5")
        assert row.notes == "fuel"
        assert row.position == position
