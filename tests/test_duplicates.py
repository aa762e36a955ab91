"""Tests for duplicate detection."""

from datetime import datetime
from decimal import Decimal

from conftest import RecordingStore, make_transaction
from stmtimport.domain.duplicates import DuplicateDetector, day_window
from stmtimport.domain.entities import DuplicatePolicy, TransactionCandidate, TransactionType


def _candidate(**overrides):
    values = dict(
        user_id=1,
        date=datetime(2024, 1, 10, 3, 0),
        description="Coffee",
        amount=Decimal("4.50"),
        type=TransactionType.EXPENSE,
        category_id=1,
    )
    values.update(overrides)
    return TransactionCandidate(**values)


def test_day_window():
    """The window covers the whole calendar day of the value."""
    start, end = day_window(datetime(2024, 1, 10, 15, 45))
    assert start == datetime(2024, 1, 10, 0, 0)
    assert end == datetime(2024, 1, 10, 23, 59, 59, 999999)


def test_same_day_matches():
    """Entries at any time of the stored transaction's day are duplicates."""
    store = RecordingStore(
        existing=[make_transaction(date=datetime(2024, 1, 10, 12, 0), description="Coffee", amount=Decimal("4.50"))]
    )
    detector = DuplicateDetector(store)

    assert detector.is_duplicate(_candidate(date=datetime(2024, 1, 10, 3, 0)))
    assert detector.is_duplicate(_candidate(date=datetime(2024, 1, 10, 23, 0)))
    assert not detector.is_duplicate(_candidate(date=datetime(2024, 1, 11, 0, 0)))


def test_match_requires_user_amount_and_description():
    """A match needs the same user, amount and exact description."""
    store = RecordingStore(existing=[make_transaction(description="Coffee", amount=Decimal("4.50"))])
    detector = DuplicateDetector(store)

    assert not detector.is_duplicate(_candidate(user_id=2))
    assert not detector.is_duplicate(_candidate(amount=Decimal("4.51")))
    assert not detector.is_duplicate(_candidate(description="coffee"))


def test_find_matches_queries_day_window():
    """The store is asked for the candidate's day window."""
    store = RecordingStore()
    DuplicateDetector(store).find_matches(_candidate())
    assert store.duplicate_queries == [
        (1, Decimal("4.50"), "Coffee", datetime(2024, 1, 10), datetime(2024, 1, 10, 23, 59, 59, 999999))
    ]


def test_skip_policy():
    """With the skip policy a duplicate is skipped."""
    store = RecordingStore(existing=[make_transaction(description="Coffee", amount=Decimal("4.50"))])
    detector = DuplicateDetector(store)
    assert detector.should_skip(_candidate(), DuplicatePolicy.SKIP)
    assert detector.should_skip(_candidate(), None)


def test_allow_policy_does_not_query():
    """With the allow policy the store is never asked."""
    store = RecordingStore(existing=[make_transaction(description="Coffee", amount=Decimal("4.50"))])
    assert not DuplicateDetector(store).should_skip(_candidate(), DuplicatePolicy.ALLOW)
    assert store.duplicate_queries == []
