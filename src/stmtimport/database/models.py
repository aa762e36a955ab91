"""SQLAlchemy models for the stmtimport database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Numeric,
    Index,
    ForeignKey,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Transaction(Base):
    """Imported transaction model.

    Category, subcategory and counterparty are opaque ids owned by other
    directories, so they carry no foreign keys here.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False)
    date = Column(DateTime, nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(String, nullable=False)
    subtype = Column(String, nullable=True)
    source = Column(String, nullable=True)
    category_id = Column(Integer, nullable=False)
    subcategory_id = Column(Integer, nullable=True)
    counterparty_id = Column(Integer, nullable=True)
    external_reference = Column(String, nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    responsibilities = relationship(
        "TransactionResponsibility",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionResponsibility.id",
    )

    # Duplicate lookups filter on user, amount, description and a date window
    __table_args__ = (Index("ix_transactions_user_date", "user_id", "date"),)


class TransactionResponsibility(Base):
    """Share of a transaction assigned to a responsible person."""

    __tablename__ = "transaction_responsibilities"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    responsible_id = Column(Integer, nullable=False)
    percentage = Column(Numeric(5, 2), nullable=False)
    notes = Column(String, nullable=True)

    transaction = relationship("Transaction", back_populates="responsibilities")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
