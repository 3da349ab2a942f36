"""
Storage abstraction layer.

All persistence goes through this interface. This allows swapping
implementations (in-memory → JSON file → MongoDB/PostgreSQL) without
changing the services.

Every mutating operation is atomic for the single document it touches.
Callers never read-modify-write: list fields are changed with push/pull,
and conditional writes go through find_one_and_update/find_one_and_delete
so the filter and the write happen together.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


# =============================================================================
# Errors
# =============================================================================


class StorageError(Exception):
    """Base exception for storage errors."""
    pass


class DuplicateKeyError(StorageError):
    """An insert or update would break a unique index."""

    def __init__(self, collection: str, field: str, value: Any):
        self.collection = collection
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for {collection}.{field}")


# =============================================================================
# Storage Interface
# =============================================================================


class MetadataStorage(ABC):
    """
    Storage for structured documents (users, tasks).

    Documents are dicts keyed by their ``id`` field. Query results are
    returned in insertion order.
    """

    @abstractmethod
    def ensure_unique(self, collection: str, field: str) -> None:
        """Declare a unique index on a field of a collection."""
        pass

    @abstractmethod
    async def insert(self, collection: str, data: dict[str, Any]) -> None:
        """
        Insert a new document.

        Raises:
            DuplicateKeyError: the id or a unique-indexed field is taken
        """
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Get the first document matching all filters."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Query documents with optional equality filters."""
        pass

    @abstractmethod
    async def find_one_and_update(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Atomically update the first match; return it after the update."""
        pass

    @abstractmethod
    async def find_one_and_delete(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Atomically delete the first match; return it as it was."""
        pass

    @abstractmethod
    async def push(self, collection: str, id: str, field: str, value: Any) -> bool:
        """Atomically append a value to a list field."""
        pass

    @abstractmethod
    async def pull(
        self,
        collection: str,
        id: str,
        field: str,
        match: dict[str, Any],
    ) -> bool:
        """Atomically remove every list entry whose keys equal ``match``."""
        pass


# =============================================================================
# Collection Names
# =============================================================================


class Collections:
    """Standard collection/table names."""

    USERS = "users"
    TASKS = "tasks"
