"""Transaction domain service."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from stmtimport.domain.entities import Transaction as TransactionEntity, TransactionCandidate
from stmtimport.domain.errors import ValidationError

if TYPE_CHECKING:
    from stmtimport.database.base import TransactionStore


class TransactionService:
    """Service for creating and listing transactions."""

    def __init__(self, store: TransactionStore):
        """Initialize transaction service.

        Args:
            store: Transaction store instance
        """
        self.store = store

    def create_transaction(self, candidate: TransactionCandidate) -> TransactionEntity:
        """Create a transaction from a classified candidate.

        Args:
            candidate: Classified candidate

        Returns:
            Stored transaction entity

        Raises:
            ValidationError: If the candidate is not storable
        """
        if not candidate.description or not candidate.description.strip():
            raise ValidationError("Transaction description is required")
        if candidate.amount < 0:
            raise ValidationError("Transaction amount must not be negative")

        return self.store.create_transaction(candidate)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.store.get_transaction(transaction_id)

    def list_transactions(
        self,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[TransactionEntity]:
        """List a user's transactions.

        Args:
            user_id: Owner of the transactions
            start: Optional inclusive lower bound on the date
            end: Optional inclusive upper bound on the date

        Returns:
            List of transaction entities ordered by date
        """
        return self.store.list_transactions(user_id=user_id, start=start, end=end)
