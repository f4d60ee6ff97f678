"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (in-memory for development and tests, MongoDB in
production) without changing application code.

Unique indexes declared with ``ensure_unique`` are enforced by the
backend itself, so a duplicate write fails even when two requests pass
the service-level pre-check at the same time.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


# Sort spec: [(field, 1)] ascending, [(field, -1)] descending
SortSpec = list[tuple[str, int]]


class DuplicateKeyError(Exception):
    """A write would violate a unique index."""
    
    def __init__(self, collection: str, field: str, value: Any = None):
        self.collection = collection
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for {collection}.{field}: {value!r}")


# =============================================================================
# Storage Interface
# =============================================================================


class MetadataStorage(ABC):
    """
    Storage for structured documents (users, content).
    
    Filters are a dict of field -> value for exact matches, or
    field -> {"$in": [...]} to match any of several values. A list-valued
    field matches when any of its elements match.
    """
    
    async def initialize(self) -> None:
        """Open connections / create indexes. Called once at startup."""
        pass
    
    async def close(self) -> None:
        """Release resources. Called once at shutdown."""
        pass
    
    @abstractmethod
    async def ensure_unique(self, collection: str, field: str) -> None:
        """Declare a unique index on ``collection.field``."""
        pass
    
    @abstractmethod
    async def insert(self, collection: str, id: str, data: dict[str, Any]) -> None:
        """
        Insert a new document.
        
        Raises:
            DuplicateKeyError: the id or a unique field is already taken
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
        """Get the first document matching the filters."""
        pass
    
    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        pass
    
    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int = 100,
        offset: int = 0,
        sort: SortSpec | None = None,
    ) -> list[dict[str, Any]]:
        """Query documents with optional filters, sort and pagination."""
        pass
    
    @abstractmethod
    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        """Count documents matching the filters."""
        pass
    
    @abstractmethod
    async def update(self, collection: str, id: str, updates: dict[str, Any]) -> bool:
        """
        Partial update of a document. Returns False if it did not exist.
        
        Raises:
            DuplicateKeyError: the update would collide on a unique field
        """
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for the storage backends.
    
    Initialize once at app startup with the appropriate implementation.
    Services receive this and use the interfaces without knowing
    the underlying implementation.
    """
    
    model_config = {"arbitrary_types_allowed": True}
    
    metadata: MetadataStorage


# =============================================================================
# Collection Names (for MetadataStorage)
# =============================================================================


class Collections:
    """Standard collection/table names."""
    
    USERS = "users"
    CONTENT = "content"
