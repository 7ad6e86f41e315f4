"""Versioned record storage with compare-and-set commits.

A store keeps one frozen Pydantic snapshot per key together with a version
counter. Writers read (snapshot, version), compute a new snapshot, and commit
with compare_and_set. The commit succeeds only if the version is still the
one they read, which gives single-writer semantics per key without holding
any lock across the read-compute-commit cycle.

Version 0 means "no record": compare_and_set(key, 0, value) creates a record
at version 1 and fails if the key already exists.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()

ABSENT_VERSION = 0

ModelT = TypeVar("ModelT", bound=BaseModel)


class StorageError(Exception):
    """Base class for storage adapter errors."""


class RecordNotFoundError(StorageError):
    """No record is stored under the key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"No record stored under {key!r}")


class VersionConflictError(StorageError):
    """Stored version differs from the version the writer read."""

    def __init__(self, key: str, expected_version: int, actual_version: int) -> None:
        self.key = key
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Version conflict on {key!r}: expected {expected_version}, found {actual_version}",
        )


@dataclass(frozen=True)
class StoredRecord(Generic[ModelT]):
    """A snapshot and the version it was committed at."""

    value: ModelT
    version: int


class VersionedStore(Protocol[ModelT]):
    """Protocol for versioned snapshot persistence."""

    def get(self, key: str) -> StoredRecord[ModelT]: ...

    def compare_and_set(self, key: str, expected_version: int, value: ModelT) -> int: ...

    def scan(self) -> list[StoredRecord[ModelT]]: ...


def _copy_record(record: StoredRecord[ModelT]) -> StoredRecord[ModelT]:
    return StoredRecord(value=record.value.model_copy(deep=True), version=record.version)


class InMemoryStore(Generic[ModelT]):
    """Process-local store. Compare-and-set is atomic under a single lock.

    Frozen models can still hold mutable containers (dicts, lists), so the
    store keeps its own deep copy of every committed value and hands out
    deep copies from get() and scan().
    """

    def __init__(self) -> None:
        self._records: dict[str, StoredRecord[ModelT]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> StoredRecord[ModelT]:
        record = self._records.get(key)
        if record is None:
            raise RecordNotFoundError(key)
        return _copy_record(record)

    def compare_and_set(self, key: str, expected_version: int, value: ModelT) -> int:
        """Store value at expected_version + 1. Returns the new version."""
        with self._lock:
            current = self._records.get(key)
            actual_version = current.version if current is not None else ABSENT_VERSION
            if actual_version != expected_version:
                raise VersionConflictError(key, expected_version, actual_version)
            new_version = expected_version + 1
            self._records[key] = StoredRecord(value=value.model_copy(deep=True), version=new_version)
        logger.debug("record committed", key=key, version=new_version)
        return new_version

    def scan(self) -> list[StoredRecord[ModelT]]:
        """Return all records in insertion order."""
        return [_copy_record(record) for record in list(self._records.values())]
