"""Shared pytest fixtures for splitledger tests."""

import tempfile
import os
from decimal import Decimal
from pathlib import Path
import pytest

from splitledger.database.factories import create_sqlite_database
from splitledger.domain.csv_import import StatementImportService
from splitledger.domain.entities import (
    ResponsibilityAllocation,
    TransactionSource,
    TransactionSubtype,
)
from splitledger.domain.import_config import ImportConfiguration
from splitledger.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def refs(temp_db):
    """Create the reference entities transactions point at."""
    owner_id = temp_db.create_user("Ana")
    category_id = temp_db.create_category("Groceries")
    return {
        "owner": owner_id,
        "other_owner": temp_db.create_user("Bruno"),
        "category": category_id,
        "other_category": temp_db.create_category("Salary"),
        "subcategory": temp_db.create_subcategory("Supermarket", category_id),
        "source_entity": temp_db.create_source_entity("Nubank", owner_id=owner_id),
        "alice": temp_db.create_responsible("Alice"),
        "bob": temp_db.create_responsible("Bob"),
    }


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a StatementImportService with a temporary database."""
    return StatementImportService(temp_db)


@pytest.fixture
def import_config(refs):
    """Import configuration splitting every entry 100% to Alice."""
    return ImportConfiguration(
        owner_id=refs["owner"],
        default_category_id=refs["category"],
        default_subtype=TransactionSubtype.VARIABLE,
        default_source=TransactionSource.BANK_TRANSACTION,
        responsibilities=(ResponsibilityAllocation(refs["alice"], Decimal("100")),),
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
