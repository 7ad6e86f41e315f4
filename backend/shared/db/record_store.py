"""SQLite-backed versioned record store."""

from __future__ import annotations

import sqlite3
import threading
from typing import TYPE_CHECKING, Generic

import structlog

from shared.storage import (
    ABSENT_VERSION,
    ModelT,
    RecordNotFoundError,
    StoredRecord,
    VersionConflictError,
)

if TYPE_CHECKING:
    from shared.db.connection import Database

logger = structlog.get_logger()


class SqliteStore(Generic[ModelT]):
    """SQLite implementation of VersionedStore.

    Stores each snapshot as model JSON next to its version. Compare-and-set
    is a single conditional UPDATE (or INSERT for version 0), so the version
    check and the write cannot interleave with another writer.
    """

    def __init__(self, db: Database, model_type: type[ModelT]) -> None:
        self._db = db
        self._model_type = model_type
        self._lock = threading.Lock()

    def get(self, key: str) -> StoredRecord[ModelT]:
        row = self._db.connection.execute(
            "SELECT version, data FROM records WHERE id = ?",
            (key,),
        ).fetchone()
        if row is None:
            raise RecordNotFoundError(key)
        return self._to_record(row)

    def compare_and_set(self, key: str, expected_version: int, value: ModelT) -> int:
        """Store value at expected_version + 1. Returns the new version."""
        new_version = expected_version + 1
        data = value.model_dump_json()
        conn = self._db.connection
        with self._lock:
            try:
                if expected_version == ABSENT_VERSION:
                    conn.execute(
                        "INSERT INTO records (id, version, seq, data) "
                        "VALUES (?, ?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM records), ?)",
                        (key, new_version, data),
                    )
                    conn.commit()
                    return new_version

                cursor = conn.execute(
                    "UPDATE records SET version = ?, data = ? WHERE id = ? AND version = ?",
                    (new_version, data, key, expected_version),
                )
                if cursor.rowcount == 1:
                    conn.commit()
                    return new_version
                conn.rollback()
            except sqlite3.IntegrityError:
                conn.rollback()

            actual_version = self._current_version(key)
        logger.debug("record version conflict", key=key, expected=expected_version, actual=actual_version)
        raise VersionConflictError(key, expected_version, actual_version)

    def scan(self) -> list[StoredRecord[ModelT]]:
        """Return all records in creation order."""
        rows = self._db.connection.execute("SELECT version, data FROM records ORDER BY seq").fetchall()
        return [self._to_record(row) for row in rows]

    def _current_version(self, key: str) -> int:
        row = self._db.connection.execute("SELECT version FROM records WHERE id = ?", (key,)).fetchone()
        return row[0] if row is not None else ABSENT_VERSION

    def _to_record(self, row: tuple[int, str]) -> StoredRecord[ModelT]:
        version, data = row
        return StoredRecord(value=self._model_type.model_validate_json(data), version=version)
