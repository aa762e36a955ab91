"""Duplicate detection against previously stored transactions."""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING, Optional

from stmtimport.domain.entities import DuplicatePolicy, Transaction, TransactionCandidate

if TYPE_CHECKING:
    from stmtimport.database.base import TransactionStore

logger = logging.getLogger(__name__)


def day_window(moment: datetime) -> tuple[datetime, datetime]:
    """Return the calendar day containing ``moment``.

    The window runs from midnight to one microsecond before the next
    midnight, in whatever zone the value itself carries.
    """
    start = datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)
    end = start + timedelta(days=1) - timedelta(microseconds=1)
    return start, end


class DuplicateDetector:
    """Finds stored transactions that represent the same real-world one."""

    def __init__(self, store: TransactionStore):
        """Initialize duplicate detector.

        Args:
            store: Transaction store to query
        """
        self.store = store

    def find_matches(self, candidate: TransactionCandidate) -> list[Transaction]:
        """Return stored transactions of the same user, amount and
        description on the candidate's calendar day."""
        if candidate.date is None:
            return []
        start, end = day_window(candidate.date)
        return self.store.find_potential_duplicates(
            user_id=candidate.user_id,
            amount=candidate.amount,
            description=candidate.description,
            start=start,
            end=end,
        )

    def is_duplicate(self, candidate: TransactionCandidate) -> bool:
        return bool(self.find_matches(candidate))

    def should_skip(self, candidate: TransactionCandidate, policy: Optional[DuplicatePolicy]) -> bool:
        """Return True when the candidate is a duplicate and policy says skip.

        With the allow policy duplicates are created anyway, so the store
        is not queried at all.
        """
        if policy == DuplicatePolicy.ALLOW:
            return False
        matches = self.find_matches(candidate)
        if matches:
            logger.debug(
                "Candidate '%s' on %s matches stored transaction(s) %s",
                candidate.description,
                candidate.date.date(),
                [m.id for m in matches],
            )
        return bool(matches)
