"""Abstract transaction store interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from stmtimport.domain.entities import Transaction, TransactionCandidate


class TransactionStore(ABC):
    """Abstract persistent store consumed by the statement importer."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize store schema (create tables)."""
        pass

    @abstractmethod
    def find_potential_duplicates(
        self,
        user_id: int,
        amount: Decimal,
        description: str,
        start: datetime,
        end: datetime,
    ) -> list[Transaction]:
        """Find the user's transactions with this amount and description
        dated between start and end, both inclusive."""
        pass

    @abstractmethod
    def create_transaction(self, candidate: TransactionCandidate) -> Transaction:
        """Persist a candidate. Returns the stored transaction."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Transaction]:
        """List a user's transactions ordered by date, with optional bounds."""
        pass
