"""Tests for the transaction domain service."""

import logging
import pytest
from dataclasses import replace
from datetime import date
from decimal import Decimal

from splitledger.domain.entities import (
    ResponsibilityAllocation,
    TransactionCommand,
    TransactionFilter,
    TransactionSource,
    TransactionSubtype,
    TransactionType,
)
from splitledger.domain.errors import (
    InvalidAllocationError,
    MissingReferenceError,
    NotFoundError,
    ValidationError,
)
from splitledger.domain.notifications import CounterMetricsSink, NotificationDispatcher
from splitledger.domain.transaction import TransactionService


@pytest.fixture
def command(refs):
    return TransactionCommand(
        owner_id=refs["owner"],
        type=TransactionType.EXPENSE,
        subtype=TransactionSubtype.VARIABLE,
        source=TransactionSource.DEBIT_CARD,
        description="Dinner",
        amount=Decimal("100.00"),
        date=date(2024, 1, 15),
        category_id=refs["category"],
        subcategory_id=refs["subcategory"],
        source_entity_id=refs["source_entity"],
        responsibilities=(
            ResponsibilityAllocation(refs["alice"], Decimal("60"), "paid the tip"),
            ResponsibilityAllocation(refs["bob"], Decimal("40")),
        ),
    )


class RecordingObserver:
    def __init__(self):
        self.updates = []
        self.dashboards = []

    def notify_transaction_update(self, owner_id, transaction):
        self.updates.append((owner_id, transaction.id))

    def notify_dashboard_update(self, owner_id):
        self.dashboards.append(owner_id)


class FailingObserver:
    def notify_transaction_update(self, owner_id, transaction):
        raise RuntimeError("socket closed")

    def notify_dashboard_update(self, owner_id):
        raise RuntimeError("aggregator down")


def test_create_transaction(transaction_service, command):
    txn = transaction_service.create(command)

    assert txn.id is not None
    assert txn.amount == Decimal("100.00")
    assert txn.description == "Dinner"
    assert txn.subcategory_id == command.subcategory_id
    assert [(r.responsible_id, r.percentage, r.notes) for r in txn.responsibilities] == [
        (command.responsibilities[0].responsible_id, Decimal("60"), "paid the tip"),
        (command.responsibilities[1].responsible_id, Decimal("40"), None),
    ]
    assert txn.total_percentage == Decimal("100")
    assert txn.reconciled is False


def test_allocation_amounts(transaction_service, command):
    txn = transaction_service.create(command)

    assert [r.amount_of(txn.amount) for r in txn.responsibilities] == [
        Decimal("60.00"),
        Decimal("40.00"),
    ]


def test_allocations_not_summing_to_100_are_rejected(transaction_service, command, refs):
    """60 + 30 is rejected and nothing is stored."""
    bad = replace(
        command,
        responsibilities=(
            ResponsibilityAllocation(refs["alice"], Decimal("60")),
            ResponsibilityAllocation(refs["bob"], Decimal("30")),
        ),
    )

    with pytest.raises(InvalidAllocationError, match="90"):
        transaction_service.create(bad)

    assert transaction_service.count_transactions(TransactionFilter(owner_id=refs["owner"])) == 0


@pytest.mark.parametrize(
    "allocations",
    [
        (),
        ((0, "100"), (0, "0")),
        ((0, "50"), (0, "50")),
        ((0, "150"), (1, "-50")),
    ],
)
def test_invalid_allocations(transaction_service, command, refs, allocations):
    responsibles = [refs["alice"], refs["bob"]]
    bad = replace(
        command,
        responsibilities=tuple(
            ResponsibilityAllocation(responsibles[index], Decimal(pct)) for index, pct in allocations
        ),
    )

    with pytest.raises(InvalidAllocationError):
        transaction_service.create(bad)


def test_fractional_allocations(transaction_service, command, refs):
    split = replace(
        command,
        responsibilities=(
            ResponsibilityAllocation(refs["alice"], Decimal("33.33")),
            ResponsibilityAllocation(refs["bob"], Decimal("66.67")),
        ),
    )

    txn = transaction_service.create(split)

    assert txn.total_percentage == Decimal("100")


@pytest.mark.parametrize("second_share", ["39", "41"])
def test_allocations_one_off_from_100_are_rejected(transaction_service, command, refs, second_share):
    bad = replace(
        command,
        responsibilities=(
            ResponsibilityAllocation(refs["alice"], Decimal("60")),
            ResponsibilityAllocation(refs["bob"], Decimal(second_share)),
        ),
    )

    with pytest.raises(InvalidAllocationError, match="sum to 100"):
        transaction_service.create(bad)

    assert transaction_service.count_transactions(TransactionFilter(owner_id=refs["owner"])) == 0


def test_percentages_below_cents_are_rejected(transaction_service, command, refs):
    """33.335 + 66.665 sums to 100 but would be stored as 33.34 + 66.67."""
    bad = replace(
        command,
        responsibilities=(
            ResponsibilityAllocation(refs["alice"], Decimal("33.335")),
            ResponsibilityAllocation(refs["bob"], Decimal("66.665")),
        ),
    )

    with pytest.raises(InvalidAllocationError, match="at most 2 decimal places"):
        transaction_service.create(bad)

    assert transaction_service.count_transactions(TransactionFilter(owner_id=refs["owner"])) == 0


def test_stored_allocations_still_sum_to_100(transaction_service, command, refs):
    split = replace(
        command,
        responsibilities=(
            ResponsibilityAllocation(refs["alice"], Decimal("33.33")),
            ResponsibilityAllocation(refs["bob"], Decimal("66.67")),
        ),
    )
    txn = transaction_service.create(split)

    stored = transaction_service.get_transaction(refs["owner"], txn.id)
    kept = transaction_service.overwrite(
        refs["owner"], txn.id, replace(split, amount=Decimal("99.99"))
    )

    assert stored.total_percentage == Decimal("100")
    assert kept.amount == Decimal("99.99")
    assert kept.total_percentage == Decimal("100")


@pytest.mark.parametrize(
    "field, value, kind",
    [
        ("owner_id", 999, "User"),
        ("category_id", 999, "Category"),
        ("subcategory_id", 999, "Subcategory"),
        ("source_entity_id", 999, "SourceEntity"),
    ],
)
def test_missing_references(transaction_service, command, field, value, kind):
    with pytest.raises(MissingReferenceError) as excinfo:
        transaction_service.create(replace(command, **{field: value}))

    assert excinfo.value.entity_kind == kind
    assert excinfo.value.code == "NOT_FOUND"


def test_missing_responsible(transaction_service, command):
    bad = replace(command, responsibilities=(ResponsibilityAllocation(999, Decimal("100")),))

    with pytest.raises(MissingReferenceError, match="Responsible 999 not found"):
        transaction_service.create(bad)


def test_subcategory_must_belong_to_category(transaction_service, command, refs):
    with pytest.raises(ValidationError, match="does not belong"):
        transaction_service.create(replace(command, category_id=refs["other_category"]))


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_amount_must_be_positive(transaction_service, command, amount):
    with pytest.raises(ValidationError, match="greater than zero"):
        transaction_service.create(replace(command, amount=Decimal(amount)))


@pytest.mark.parametrize("amount", ["10.005", "0.004"])
def test_amount_below_cents_is_rejected(transaction_service, command, refs, amount):
    with pytest.raises(ValidationError, match="at most 2 decimal places") as excinfo:
        transaction_service.create(replace(command, amount=Decimal(amount)))

    assert excinfo.value.code == "VALIDATION_FAILED"
    assert transaction_service.count_transactions(TransactionFilter(owner_id=refs["owner"])) == 0


def test_amount_round_trips_exactly(transaction_service, command):
    txn = transaction_service.create(replace(command, amount=Decimal("10.5")))

    assert txn.amount == Decimal("10.50")


def test_description_required(transaction_service, command):
    with pytest.raises(ValidationError) as excinfo:
        transaction_service.create(replace(command, description="  "))

    assert excinfo.value.code == "VALIDATION_FAILED"


def test_get_transaction_hides_other_owners(transaction_service, command, refs):
    txn = transaction_service.create(command)

    assert transaction_service.get_transaction(refs["owner"], txn.id) == txn
    assert transaction_service.get_transaction(refs["other_owner"], txn.id) is None
    assert transaction_service.get_transaction(refs["owner"], 999) is None


def test_update_replaces_allocations(transaction_service, command, refs):
    txn = transaction_service.create(command)
    changed = replace(
        command,
        description="Dinner with friends",
        amount=Decimal("120.00"),
        responsibilities=(ResponsibilityAllocation(refs["bob"], Decimal("100")),),
    )

    updated = transaction_service.update(refs["owner"], txn.id, changed)

    assert updated.id == txn.id
    assert updated.description == "Dinner with friends"
    assert updated.amount == Decimal("120.00")
    assert [r.responsible_id for r in updated.responsibilities] == [refs["bob"]]


def test_update_same_responsibles_again(transaction_service, command, refs):
    """Re-saving the same allocation set does not trip the uniqueness constraint."""
    txn = transaction_service.create(command)

    updated = transaction_service.update(refs["owner"], txn.id, command)

    assert len(updated.responsibilities) == 2


def test_update_invalid_command_leaves_stored_values(transaction_service, command, refs):
    txn = transaction_service.create(command)

    with pytest.raises(InvalidAllocationError):
        transaction_service.update(refs["owner"], txn.id, replace(command, responsibilities=()))

    assert transaction_service.get_transaction(refs["owner"], txn.id) == txn


def test_update_cannot_change_owner(transaction_service, command, refs):
    txn = transaction_service.create(command)

    with pytest.raises(ValidationError, match="another owner"):
        transaction_service.update(
            refs["owner"], txn.id, replace(command, owner_id=refs["other_owner"])
        )


def test_update_not_found(transaction_service, command, refs):
    with pytest.raises(NotFoundError):
        transaction_service.update(refs["owner"], 999, command)


def test_delete(transaction_service, command, refs):
    txn = transaction_service.create(command)

    transaction_service.delete(refs["owner"], txn.id)

    assert transaction_service.get_transaction(refs["owner"], txn.id) is None
    with pytest.raises(NotFoundError):
        transaction_service.delete(refs["owner"], txn.id)


def test_delete_other_owner_not_found(transaction_service, command, refs):
    txn = transaction_service.create(command)

    with pytest.raises(NotFoundError):
        transaction_service.delete(refs["other_owner"], txn.id)


def test_list_and_count(transaction_service, command, refs):
    first = transaction_service.create(command)
    second = transaction_service.create(
        replace(command, description="Lunch", date=date(2024, 2, 1))
    )

    everything = TransactionFilter(owner_id=refs["owner"])
    assert [t.id for t in transaction_service.list_transactions(everything)] == [second.id, first.id]
    assert transaction_service.count_transactions(everything) == 2

    january = TransactionFilter(owner_id=refs["owner"], end_date=date(2024, 1, 31))
    assert [t.id for t in transaction_service.list_transactions(january)] == [first.id]

    search = TransactionFilter(owner_id=refs["owner"], description="LUNCH")
    assert [t.id for t in transaction_service.list_transactions(search)] == [second.id]

    assert [t.id for t in transaction_service.list_transactions(everything, limit=1, offset=1)] == [
        first.id
    ]
    assert transaction_service.count_transactions(TransactionFilter(owner_id=refs["other_owner"])) == 0


def test_observers_are_notified(temp_db, command, refs):
    observer = RecordingObserver()
    metrics = CounterMetricsSink()
    service = TransactionService(temp_db, NotificationDispatcher([observer], metrics))

    txn = service.create(command)
    service.update(refs["owner"], txn.id, replace(command, description="Brunch"))
    service.delete(refs["owner"], txn.id)

    assert observer.updates == [(refs["owner"], txn.id)] * 3
    assert observer.dashboards == [refs["owner"]] * 3
    assert metrics.counts == {"created": 1, "updated": 1, "deleted": 1}


def test_failing_observer_does_not_fail_the_write(temp_db, command, refs, caplog):
    """The write succeeds, the failure is logged, and other observers still run."""
    recording = RecordingObserver()
    dispatcher = NotificationDispatcher([FailingObserver()])
    dispatcher.attach(recording)
    service = TransactionService(temp_db, dispatcher)

    with caplog.at_level(logging.WARNING, logger="splitledger.domain.notifications"):
        txn = service.create(command)

    assert service.get_transaction(refs["owner"], txn.id) is not None
    assert recording.updates == [(refs["owner"], txn.id)]
    assert "socket closed" in caplog.text
    assert "aggregator down" in caplog.text


def test_failed_validation_sends_no_notification(temp_db, command):
    observer = RecordingObserver()
    service = TransactionService(temp_db, NotificationDispatcher([observer]))

    with pytest.raises(ValidationError):
        service.create(replace(command, amount=Decimal("0")))

    assert observer.updates == []
