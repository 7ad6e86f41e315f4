"""SQLite database layer: connection management and versioned record storage."""

from shared.db.connection import Database
from shared.db.record_store import SqliteStore

__all__ = [
    "Database",
    "SqliteStore",
]
