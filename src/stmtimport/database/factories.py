"""Factory functions for the SQLite transaction store."""

import os
from pathlib import Path
from typing import Optional

from stmtimport.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "STMTIMPORT_DB_PATH"
DEFAULT_DATA_DIR = ".stmtimport"
DEFAULT_DATABASE_NAME = "stmtimport.db"
IN_MEMORY = ":memory:"


def resolve_database_path(database_path: Optional[str] = None) -> str:
    """Return the SQLite file to use and make sure its directory exists.

    Precedence: the explicit path, then STMTIMPORT_DB_PATH, then
    ~/.stmtimport/stmtimport.db. ``~`` is expanded in configured paths.
    """
    raw = database_path or os.environ.get(DB_PATH_ENV)
    if raw == IN_MEMORY:
        return IN_MEMORY
    if raw:
        path = Path(raw).expanduser()
    else:
        path = Path.home() / DEFAULT_DATA_DIR / DEFAULT_DATABASE_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    return str(path)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite-backed transaction store.

    Args:
        database_path: SQLite file, or ``:memory:`` for a throwaway store

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = resolve_database_path(database_path)
    if path == IN_MEMORY:
        return SQLAlchemyDatabase("sqlite://")
    return SQLAlchemyDatabase(f"sqlite:///{path}")
