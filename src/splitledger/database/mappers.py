"""Mapper functions to convert between domain models and SQLAlchemy models.

Each function copies its fields explicitly, one type per function.
"""

from splitledger.domain import entities as domain
from splitledger.database.models import (
    Category as ORMCategory,
    Responsible as ORMResponsible,
    SourceEntity as ORMSourceEntity,
    Subcategory as ORMSubcategory,
    Transaction as ORMTransaction,
    TransactionResponsibility as ORMTransactionResponsibility,
    User as ORMUser,
)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        name=orm_user.name,
        created_at=orm_user.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        created_at=orm_category.created_at,
    )


def subcategory_to_domain(orm_subcategory: ORMSubcategory) -> domain.Subcategory:
    """Convert SQLAlchemy Subcategory model to domain Subcategory entity."""
    return domain.Subcategory(
        id=orm_subcategory.id,
        name=orm_subcategory.name,
        category_id=orm_subcategory.category_id,
        created_at=orm_subcategory.created_at,
    )


def source_entity_to_domain(orm_source: ORMSourceEntity) -> domain.SourceEntity:
    """Convert SQLAlchemy SourceEntity model to domain SourceEntity entity."""
    return domain.SourceEntity(
        id=orm_source.id,
        name=orm_source.name,
        owner_id=orm_source.owner_id,
        created_at=orm_source.created_at,
    )


def responsible_to_domain(orm_responsible: ORMResponsible) -> domain.Responsible:
    """Convert SQLAlchemy Responsible model to domain Responsible entity."""
    return domain.Responsible(
        id=orm_responsible.id,
        name=orm_responsible.name,
        created_at=orm_responsible.created_at,
    )


def allocation_to_domain(
    orm_allocation: ORMTransactionResponsibility,
) -> domain.ResponsibilityAllocation:
    """Convert a stored responsibility row to a domain allocation."""
    return domain.ResponsibilityAllocation(
        responsible_id=orm_allocation.responsible_id,
        percentage=orm_allocation.percentage,
        notes=orm_allocation.notes,
    )


def allocation_to_orm(
    allocation: domain.ResponsibilityAllocation, position: int
) -> ORMTransactionResponsibility:
    """Build a responsibility row for an allocation at the given position."""
    return ORMTransactionResponsibility(
        responsible_id=allocation.responsible_id,
        percentage=allocation.percentage,
        notes=allocation.notes,
        position=position,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        type=orm_transaction.type,
        subtype=orm_transaction.subtype,
        source=orm_transaction.source,
        description=orm_transaction.description,
        amount=orm_transaction.amount,
        date=orm_transaction.date,
        category_id=orm_transaction.category_id,
        subcategory_id=orm_transaction.subcategory_id,
        source_entity_id=orm_transaction.source_entity_id,
        responsibilities=tuple(
            allocation_to_domain(r) for r in orm_transaction.responsibilities
        ),
        reconciled_amount=orm_transaction.reconciled_amount,
        reconciliation_date=orm_transaction.reconciliation_date,
        reconciled=orm_transaction.reconciled,
        reconciliation_notes=orm_transaction.reconciliation_notes,
        bank_reference=orm_transaction.bank_reference,
        external_reference=orm_transaction.external_reference,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
    )


def apply_command(orm_transaction: ORMTransaction, command: domain.TransactionCommand) -> None:
    """Copy a create/update command onto an ORM transaction, replacing allocations."""
    orm_transaction.owner_id = command.owner_id
    orm_transaction.type = command.type
    orm_transaction.subtype = command.subtype
    orm_transaction.source = command.source
    orm_transaction.description = command.description
    orm_transaction.amount = command.amount
    orm_transaction.date = command.date
    orm_transaction.category_id = command.category_id
    orm_transaction.subcategory_id = command.subcategory_id
    orm_transaction.source_entity_id = command.source_entity_id
    orm_transaction.responsibilities = [
        allocation_to_orm(allocation, position)
        for position, allocation in enumerate(command.responsibilities)
    ]


def apply_reconciliation(
    orm_transaction: ORMTransaction, record: domain.ReconciliationRecord
) -> None:
    """Copy every reconciliation field verbatim, None included.

    The record must already be normalized (naive UTC timestamps).
    """
    orm_transaction.reconciled_amount = record.reconciled_amount
    orm_transaction.reconciliation_date = record.reconciliation_date
    orm_transaction.reconciled = record.reconciled
    orm_transaction.reconciliation_notes = record.reconciliation_notes
    orm_transaction.bank_reference = record.bank_reference
    orm_transaction.external_reference = record.external_reference
