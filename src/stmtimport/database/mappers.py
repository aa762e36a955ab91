"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the enum values that
are stored as plain strings.
"""

from stmtimport.domain import entities as domain
from stmtimport.database.models import Transaction as ORMTransaction, TransactionResponsibility


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        amount=orm_transaction.amount,
        type=domain.TransactionType(orm_transaction.type),
        subtype=domain.TransactionSubtype(orm_transaction.subtype) if orm_transaction.subtype else None,
        source=domain.TransactionSource(orm_transaction.source) if orm_transaction.source else None,
        category_id=orm_transaction.category_id,
        subcategory_id=orm_transaction.subcategory_id,
        counterparty_id=orm_transaction.counterparty_id,
        external_reference=orm_transaction.external_reference,
        imported_at=orm_transaction.imported_at,
        responsibilities=tuple(
            domain.ResponsibilityAllocation(
                responsible_id=r.responsible_id,
                percentage=r.percentage,
                notes=r.notes,
            )
            for r in orm_transaction.responsibilities
        ),
    )


def candidate_to_orm(candidate: domain.TransactionCandidate) -> ORMTransaction:
    """Convert a domain TransactionCandidate to a new SQLAlchemy Transaction."""
    return ORMTransaction(
        user_id=candidate.user_id,
        date=candidate.date,
        description=candidate.description,
        amount=candidate.amount,
        type=candidate.type.value,
        subtype=candidate.subtype.value if candidate.subtype else None,
        source=candidate.source.value if candidate.source else None,
        category_id=candidate.category_id,
        subcategory_id=candidate.subcategory_id,
        counterparty_id=candidate.counterparty_id,
        external_reference=candidate.external_reference,
        responsibilities=[
            TransactionResponsibility(
                responsible_id=allocation.responsible_id,
                percentage=allocation.normalized_percentage(),
                notes=allocation.notes,
            )
            for allocation in candidate.responsibilities
        ],
    )
