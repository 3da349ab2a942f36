"""
Storage abstractions.

- MetadataStorage → in-memory (dev/tests) or JSON file (single process)
"""

from tasklist.storage.base import (
    MetadataStorage,
    Collections,
    StorageError,
    DuplicateKeyError,
)
from tasklist.storage.local import (
    InMemoryMetadataStorage,
    JsonFileMetadataStorage,
    create_storage,
)

__all__ = [
    "MetadataStorage",
    "Collections",
    "StorageError",
    "DuplicateKeyError",
    "InMemoryMetadataStorage",
    "JsonFileMetadataStorage",
    "create_storage",
]
