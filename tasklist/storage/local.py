"""
Local storage implementations.

In-memory for development and tests, plus a JSON-file variant that keeps
data across restarts without any external services.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

from tasklist.config import Settings
from tasklist.storage.base import DuplicateKeyError, MetadataStorage

logger = logging.getLogger(__name__)


def _matches(doc: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    if not filters:
        return True
    return all(doc.get(key) == value for key, value in filters.items())


# =============================================================================
# In-Memory Metadata Storage
# =============================================================================


class InMemoryMetadataStorage(MetadataStorage):
    """
    In-memory document storage.

    Every operation runs under one lock and never awaits while holding it,
    so each call is atomic with respect to every other call.
    """

    def __init__(self):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self._unique: dict[str, set[str]] = {}
        self._lock = threading.RLock()

    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._data.setdefault(collection, {})

    def _check_unique(
        self,
        collection: str,
        doc: dict[str, Any],
        ignore_id: str | None = None,
    ) -> None:
        for field in self._unique.get(collection, ()):
            if field not in doc:
                continue
            for other in self._collection(collection).values():
                if other["id"] != ignore_id and other.get(field) == doc[field]:
                    raise DuplicateKeyError(collection, field, doc[field])

    def _commit(self) -> None:
        """Hook called after each mutation, lock held. May raise."""
        pass

    def _write(self, collection: str, id: str, doc: dict[str, Any] | None) -> None:
        """
        Replace one document (or delete it when ``doc`` is None) and commit.

        Stored documents are never mutated in place, so a shallow snapshot
        of the collection is enough to undo the change if the commit fails.
        """
        docs = self._collection(collection)
        snapshot = dict(docs)
        if doc is None:
            del docs[id]
        else:
            docs[id] = doc
        try:
            self._commit()
        except Exception:
            self._data[collection] = snapshot
            raise

    def ensure_unique(self, collection: str, field: str) -> None:
        with self._lock:
            self._unique.setdefault(collection, set()).add(field)

    async def insert(self, collection: str, data: dict[str, Any]) -> None:
        with self._lock:
            docs = self._collection(collection)
            if data["id"] in docs:
                raise DuplicateKeyError(collection, "id", data["id"])
            self._check_unique(collection, data)
            self._write(collection, data["id"], copy.deepcopy(data))

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        with self._lock:
            doc = self._collection(collection).get(id)
            return copy.deepcopy(doc) if doc is not None else None

    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        with self._lock:
            for doc in self._collection(collection).values():
                if _matches(doc, filters):
                    return copy.deepcopy(doc)
            return None

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(doc)
                for doc in self._collection(collection).values()
                if _matches(doc, filters)
            ]

    async def find_one_and_update(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        with self._lock:
            for doc in self._collection(collection).values():
                if _matches(doc, filters):
                    self._check_unique(collection, updates, ignore_id=doc["id"])
                    updated = {**copy.deepcopy(doc), **copy.deepcopy(updates)}
                    self._write(collection, doc["id"], updated)
                    return copy.deepcopy(updated)
            return None

    async def find_one_and_delete(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        with self._lock:
            for id, doc in self._collection(collection).items():
                if _matches(doc, filters):
                    self._write(collection, id, None)
                    return copy.deepcopy(doc)
            return None

    async def push(self, collection: str, id: str, field: str, value: Any) -> bool:
        with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return False
            updated = copy.deepcopy(doc)
            updated.setdefault(field, []).append(copy.deepcopy(value))
            self._write(collection, id, updated)
            return True

    async def pull(
        self,
        collection: str,
        id: str,
        field: str,
        match: dict[str, Any],
    ) -> bool:
        with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return False
            updated = copy.deepcopy(doc)
            updated[field] = [
                entry for entry in doc.get(field, [])
                if not _matches(entry, match)
            ]
            self._write(collection, id, updated)
            return True


# =============================================================================
# JSON File Metadata Storage
# =============================================================================


class JsonFileMetadataStorage(InMemoryMetadataStorage):
    """
    In-memory storage mirrored to a single JSON file.

    The whole file is rewritten after every mutation (write to a temp file,
    then rename), which is fine for a single-process development server.
    """

    def __init__(self, path: str = "./data/metadata.json"):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            self._data = json.loads(self.path.read_text(encoding="utf-8"))
            logger.info(f"Loaded metadata from {self.path}")

    def _commit(self) -> None:
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(self._data), encoding="utf-8")
        os.replace(tmp_path, self.path)


# =============================================================================
# Factory
# =============================================================================


def create_storage(settings: Settings) -> MetadataStorage:
    """Create the metadata storage selected by settings."""
    if settings.storage_backend == "memory":
        return InMemoryMetadataStorage()
    if settings.storage_backend == "file":
        return JsonFileMetadataStorage(f"{settings.data_dir}/metadata.json")
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
