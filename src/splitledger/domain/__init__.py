"""Domain layer for splitledger application."""

# Services are imported lazily: the database layer imports domain.entities,
# and the services import the database layer.
_SERVICES = {
    "TransactionService": "splitledger.domain.transaction",
    "StatementImportService": "splitledger.domain.csv_import",
    "NotificationDispatcher": "splitledger.domain.notifications",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
