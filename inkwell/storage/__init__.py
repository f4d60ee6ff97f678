"""
Storage abstractions.

- MetadataStorage → MongoDB (production) or in-memory (development, tests)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from inkwell.storage.base import (
    Collections,
    DuplicateKeyError,
    MetadataStorage,
    SortSpec,
    StorageProvider,
)
from inkwell.storage.local import InMemoryMetadataStorage, create_local_storage

if TYPE_CHECKING:
    from inkwell.config import Settings


def create_storage(settings: Settings) -> StorageProvider:
    """Pick the backend from ``DATABASE_URL`` (empty means in-memory)."""
    if settings.database_url.startswith(("mongodb://", "mongodb+srv://")):
        from inkwell.storage.mongo import create_mongo_storage
        return create_mongo_storage(settings.database_url, settings.database_name)
    
    if settings.database_url:
        raise ValueError(f"Unsupported DATABASE_URL scheme: {settings.database_url.split(':', 1)[0]}")
    
    return create_local_storage()


__all__ = [
    "Collections",
    "DuplicateKeyError",
    "InMemoryMetadataStorage",
    "MetadataStorage",
    "SortSpec",
    "StorageProvider",
    "create_local_storage",
    "create_storage",
]
