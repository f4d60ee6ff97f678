"""
Local storage implementation for development and tests.

An in-memory document store that works without any external services.
It enforces unique indexes the same way the MongoDB backend does.
"""

from __future__ import annotations

import copy
from typing import Any

from inkwell.storage.base import (
    DuplicateKeyError,
    MetadataStorage,
    SortSpec,
    StorageProvider,
)


def _matches(doc: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    if not filters:
        return True
    
    for key, condition in filters.items():
        value = doc.get(key)
        candidates = value if isinstance(value, list) else [value]
        
        if isinstance(condition, dict) and "$in" in condition:
            wanted = condition["$in"]
            if not any(c in wanted for c in candidates):
                return False
        elif condition not in candidates:
            return False
    
    return True


# =============================================================================
# In-Memory Metadata Storage
# =============================================================================


class InMemoryMetadataStorage(MetadataStorage):
    """In-memory document storage for development."""
    
    def __init__(self):
        # Dicts keep insertion order, which breaks ties when sorting
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self._unique: dict[str, set[str]] = {}
    
    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._data.setdefault(collection, {})
    
    def _check_unique(self, collection: str, id: str, doc: dict[str, Any]) -> None:
        for field in self._unique.get(collection, ()):
            value = doc.get(field)
            if value is None:
                continue
            for other_id, other in self._collection(collection).items():
                if other_id != id and other.get(field) == value:
                    raise DuplicateKeyError(collection, field, value)
    
    async def ensure_unique(self, collection: str, field: str) -> None:
        self._unique.setdefault(collection, set()).add(field)
    
    async def insert(self, collection: str, id: str, data: dict[str, Any]) -> None:
        docs = self._collection(collection)
        if id in docs:
            raise DuplicateKeyError(collection, "id", id)
        
        doc = copy.deepcopy(data)
        doc["id"] = id
        self._check_unique(collection, id, doc)
        docs[id] = doc
    
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._collection(collection).get(id)
        return copy.deepcopy(doc) if doc is not None else None
    
    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        for doc in self._collection(collection).values():
            if _matches(doc, filters):
                return copy.deepcopy(doc)
        return None
    
    async def delete(self, collection: str, id: str) -> bool:
        docs = self._collection(collection)
        if id in docs:
            del docs[id]
            return True
        return False
    
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int = 100,
        offset: int = 0,
        sort: SortSpec | None = None,
    ) -> list[dict[str, Any]]:
        results = [doc for doc in self._collection(collection).values() if _matches(doc, filters)]
        
        # Apply sort (stable, least significant key first)
        if sort:
            if sort[0][1] < 0:
                results.reverse()
            for field, direction in reversed(sort):
                results.sort(key=lambda d: d.get(field), reverse=direction < 0)
        
        # Apply pagination
        return copy.deepcopy(results[offset:offset + limit])
    
    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        return sum(1 for doc in self._collection(collection).values() if _matches(doc, filters))
    
    async def update(self, collection: str, id: str, updates: dict[str, Any]) -> bool:
        docs = self._collection(collection)
        if id not in docs:
            return False
        
        merged = {**docs[id], **copy.deepcopy(updates), "id": id}
        self._check_unique(collection, id, merged)
        docs[id] = merged
        return True


# =============================================================================
# Factory
# =============================================================================


def create_local_storage() -> StorageProvider:
    """Create a StorageProvider with the in-memory implementation."""
    return StorageProvider(metadata=InMemoryMetadataStorage())
