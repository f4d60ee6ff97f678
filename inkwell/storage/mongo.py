"""
MongoDB implementation of the metadata storage.

Uses motor for async access. Unique indexes are real MongoDB indexes, so
``DuplicateKeyError`` here is the authoritative guard against two writers
racing past the same pre-check.
"""

from __future__ import annotations

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from inkwell.storage.base import (
    DuplicateKeyError,
    MetadataStorage,
    SortSpec,
    StorageProvider,
)

logger = logging.getLogger(__name__)


def _to_query(filters: dict[str, Any] | None) -> dict[str, Any]:
    if not filters:
        return {}
    return {("_id" if key == "id" else key): value for key, value in filters.items()}


def _from_mongo(doc: dict[str, Any] | None) -> dict[str, Any] | None:
    if doc is None:
        return None
    doc["id"] = doc.pop("_id")
    return doc


def _duplicate(collection: str, error: MongoDuplicateKeyError) -> DuplicateKeyError:
    details = error.details or {}
    field = next(iter(details.get("keyPattern") or {}), "id")
    value = (details.get("keyValue") or {}).get(field)
    return DuplicateKeyError(collection, "id" if field == "_id" else field, value)


class MongoMetadataStorage(MetadataStorage):
    """
    Document storage backed by a MongoDB database.
    
    Each collection name maps to a MongoDB collection; the document ``id``
    is stored as ``_id``.
    """
    
    def __init__(self, db_uri: str, db_name: str):
        self.client = AsyncIOMotorClient(db_uri, tz_aware=True)
        self.db = self.client[db_name]
    
    async def initialize(self) -> None:
        # Fails fast on a bad URI instead of on the first request
        await self.client.admin.command("ping")
        logger.info(f"Connected to MongoDB database '{self.db.name}'")
    
    async def close(self) -> None:
        self.client.close()
    
    async def ensure_unique(self, collection: str, field: str) -> None:
        await self.db[collection].create_index(field, unique=True)
    
    async def insert(self, collection: str, id: str, data: dict[str, Any]) -> None:
        doc = {**data, "_id": id}
        doc.pop("id", None)
        try:
            await self.db[collection].insert_one(doc)
        except MongoDuplicateKeyError as e:
            raise _duplicate(collection, e) from e
    
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        return _from_mongo(await self.db[collection].find_one({"_id": id}))
    
    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        return _from_mongo(await self.db[collection].find_one(_to_query(filters)))
    
    async def delete(self, collection: str, id: str) -> bool:
        result = await self.db[collection].delete_one({"_id": id})
        return result.deleted_count > 0
    
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int = 100,
        offset: int = 0,
        sort: SortSpec | None = None,
    ) -> list[dict[str, Any]]:
        cursor = self.db[collection].find(_to_query(filters))
        if sort:
            cursor = cursor.sort(sort)
        cursor = cursor.skip(offset).limit(limit)
        return [_from_mongo(doc) async for doc in cursor]
    
    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        return await self.db[collection].count_documents(_to_query(filters))
    
    async def update(self, collection: str, id: str, updates: dict[str, Any]) -> bool:
        updates = {k: v for k, v in updates.items() if k != "id"}
        try:
            result = await self.db[collection].update_one({"_id": id}, {"$set": updates})
        except MongoDuplicateKeyError as e:
            raise _duplicate(collection, e) from e
        return result.matched_count > 0


def create_mongo_storage(db_uri: str, db_name: str) -> StorageProvider:
    """Create a StorageProvider backed by MongoDB."""
    return StorageProvider(metadata=MongoMetadataStorage(db_uri, db_name))
