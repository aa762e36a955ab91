"""Database layer for stmtimport."""

from stmtimport.database.base import TransactionStore
from stmtimport.database.factories import create_sqlite_database

__all__ = ["TransactionStore", "create_sqlite_database"]
