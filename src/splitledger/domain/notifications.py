"""Post-write observers for transaction changes.

Observers are optional collaborators: the transaction service works with
none, one or several of them. A failing observer is logged and skipped, it
never affects the other observers or the caller.
"""

import logging
from collections import Counter
from typing import Iterable, Optional, Protocol, runtime_checkable

from splitledger.domain.entities import Transaction

logger = logging.getLogger(__name__)


@runtime_checkable
class RealtimeNotifier(Protocol):
    """Pushes transaction changes to a live feed."""

    def notify_transaction_update(self, owner_id: int, transaction: Transaction) -> None: ...


@runtime_checkable
class DashboardNotifier(Protocol):
    """Tells the dashboard aggregator an owner's figures changed."""

    def notify_dashboard_update(self, owner_id: int) -> None: ...


class MetricsSink(Protocol):
    """Counts transaction writes."""

    def increment_created(self) -> None: ...

    def increment_updated(self) -> None: ...

    def increment_deleted(self) -> None: ...


class CounterMetricsSink:
    """In-process MetricsSink backed by a Counter."""

    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()

    def increment_created(self) -> None:
        self.counts["created"] += 1

    def increment_updated(self) -> None:
        self.counts["updated"] += 1

    def increment_deleted(self) -> None:
        self.counts["deleted"] += 1


class NotificationDispatcher:
    """Fans a transaction change out to every attached observer."""

    def __init__(
        self,
        observers: Optional[Iterable[object]] = None,
        metrics: Optional[MetricsSink] = None,
    ):
        """Initialize dispatcher.

        Args:
            observers: Objects implementing RealtimeNotifier and/or DashboardNotifier
            metrics: Optional metrics sink
        """
        self.observers = list(observers or [])
        self.metrics = metrics

    def attach(self, observer: object) -> None:
        """Attach another observer."""
        self.observers.append(observer)

    def transaction_changed(self, transaction: Transaction, operation: str) -> None:
        """Record a write and notify observers.

        Args:
            transaction: The transaction as stored after the write (or before
                a delete)
            operation: "created", "updated" or "deleted"
        """
        self._count(operation)
        for observer in self.observers:
            if isinstance(observer, RealtimeNotifier):
                self._safely(
                    observer.notify_transaction_update,
                    "realtime",
                    operation,
                    transaction,
                    transaction.owner_id,
                    transaction,
                )
            if isinstance(observer, DashboardNotifier):
                self._safely(
                    observer.notify_dashboard_update,
                    "dashboard",
                    operation,
                    transaction,
                    transaction.owner_id,
                )

    def _count(self, operation: str) -> None:
        if self.metrics is None:
            return
        increment = {
            "created": self.metrics.increment_created,
            "updated": self.metrics.increment_updated,
            "deleted": self.metrics.increment_deleted,
        }.get(operation)
        if increment is None:
            return
        try:
            increment()
        except Exception as e:
            logger.warning("Failed to record %s metric: %s", operation, e)

    def _safely(self, call, channel: str, operation: str, transaction: Transaction, *args) -> None:
        try:
            call(*args)
            logger.debug(
                "Sent %s notification for transaction %s %s",
                channel,
                transaction.id,
                operation,
            )
        except Exception as e:
            logger.warning(
                "Failed to send %s notification for transaction %s %s: %s",
                channel,
                transaction.id,
                operation,
                e,
            )
