"""Tests for TransactionService."""

import pytest
from datetime import datetime
from decimal import Decimal

from stmtimport.domain.entities import TransactionCandidate, TransactionSource, TransactionType
from stmtimport.domain.errors import ValidationError


def _candidate(**overrides):
    values = dict(
        user_id=1,
        date=datetime(2024, 1, 10),
        description="Coffee",
        amount=Decimal("4.50"),
        type=TransactionType.EXPENSE,
        category_id=3,
    )
    values.update(overrides)
    return TransactionCandidate(**values)


def test_create_transaction(transaction_service):
    """Test creating a transaction."""
    txn = transaction_service.create_transaction(
        _candidate(source=TransactionSource.PIX, counterparty_id=9, external_reference="T1")
    )

    assert txn.id is not None
    assert txn.user_id == 1
    assert txn.date == datetime(2024, 1, 10)
    assert txn.description == "Coffee"
    assert txn.amount == Decimal("4.50")
    assert txn.type == TransactionType.EXPENSE
    assert txn.source == TransactionSource.PIX
    assert txn.subtype is None
    assert txn.counterparty_id == 9
    assert txn.external_reference == "T1"
    assert txn.imported_at is not None


def test_create_transaction_blank_description(transaction_service):
    """Test that blank descriptions are rejected."""
    with pytest.raises(ValidationError, match="description"):
        transaction_service.create_transaction(_candidate(description="  "))


def test_create_transaction_negative_amount(transaction_service):
    """Test that signed amounts are rejected."""
    with pytest.raises(ValidationError, match="negative"):
        transaction_service.create_transaction(_candidate(amount=Decimal("-1")))


def test_get_transaction(transaction_service):
    """Test getting a transaction by ID."""
    created = transaction_service.create_transaction(_candidate())
    assert transaction_service.get_transaction(created.id).description == "Coffee"
    assert transaction_service.get_transaction(9999) is None


def test_list_transactions(transaction_service):
    """Test listing a user's transactions with date bounds."""
    transaction_service.create_transaction(_candidate(date=datetime(2024, 1, 12), description="Late"))
    transaction_service.create_transaction(_candidate(date=datetime(2024, 1, 5), description="Early"))
    transaction_service.create_transaction(_candidate(user_id=2, description="Other user"))

    transactions = transaction_service.list_transactions(user_id=1)
    assert [t.description for t in transactions] == ["Early", "Late"]

    bounded = transaction_service.list_transactions(user_id=1, start=datetime(2024, 1, 6), end=datetime(2024, 1, 31))
    assert [t.description for t in bounded] == ["Late"]
