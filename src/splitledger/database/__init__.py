"""Database layer for splitledger application."""

from splitledger.database.base import Database
from splitledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
