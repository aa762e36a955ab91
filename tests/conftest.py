"""Shared pytest fixtures for stmtimport tests."""

import tempfile
import os
from datetime import datetime, UTC
from pathlib import Path
import pytest

from stmtimport.database.base import TransactionStore
from stmtimport.database.factories import create_sqlite_database
from stmtimport.domain.config import DelimitedTextOptions, ImportConfiguration
from stmtimport.domain.entities import Transaction, TransactionCandidate
from stmtimport.domain.statement_import import StatementImportService
from stmtimport.domain.transaction import TransactionService


class RecordingStore(TransactionStore):
    """In-memory store that records every call made by the importer."""

    def __init__(self, existing=None, fail_on=None):
        self.existing = list(existing or [])
        self.fail_on = set(fail_on or [])
        self.created: list[Transaction] = []
        self.create_calls = 0
        self.duplicate_queries = []

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def initialize_schema(self) -> None:
        pass

    def find_potential_duplicates(self, user_id, amount, description, start, end):
        self.duplicate_queries.append((user_id, amount, description, start, end))
        return [
            txn
            for txn in self.existing + self.created
            if txn.user_id == user_id
            and txn.amount == amount
            and txn.description == description
            and start <= txn.date <= end
        ]

    def create_transaction(self, candidate: TransactionCandidate) -> Transaction:
        self.create_calls += 1
        if candidate.description in self.fail_on:
            raise RuntimeError(f"Store rejected '{candidate.description}'")
        txn = make_transaction(
            id=len(self.existing) + len(self.created) + 1,
            user_id=candidate.user_id,
            date=candidate.date,
            description=candidate.description,
            amount=candidate.amount,
            type=candidate.type,
            subtype=candidate.subtype,
            source=candidate.source,
            category_id=candidate.category_id,
            subcategory_id=candidate.subcategory_id,
            counterparty_id=candidate.counterparty_id,
            external_reference=candidate.external_reference,
            responsibilities=candidate.responsibilities,
        )
        self.created.append(txn)
        return txn

    def get_transaction(self, transaction_id):
        for txn in self.existing + self.created:
            if txn.id == transaction_id:
                return txn
        return None

    def list_transactions(self, user_id, start=None, end=None):
        return [txn for txn in self.existing + self.created if txn.user_id == user_id]


def make_transaction(**overrides) -> Transaction:
    """Build a stored Transaction entity with sensible defaults."""
    from decimal import Decimal
    from stmtimport.domain.entities import TransactionType

    values = dict(
        id=1,
        user_id=1,
        date=datetime(2024, 1, 10),
        description="Existing",
        amount=Decimal("10.00"),
        type=TransactionType.EXPENSE,
        category_id=1,
        subcategory_id=None,
        counterparty_id=None,
        subtype=None,
        source=None,
        external_reference=None,
        imported_at=datetime.now(UTC),
    )
    values.update(overrides)
    return Transaction(**values)


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
def recording_store():
    """Create an in-memory recording store."""
    return RecordingStore()


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a StatementImportService with a temporary database."""
    return StatementImportService(temp_db)


@pytest.fixture
def csv_config():
    """Minimal CSV import configuration with a default category."""
    return ImportConfiguration(
        user_id=1,
        default_category_id=42,
        csv=DelimitedTextOptions(date_patterns=("yyyy-MM-dd",)),
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
