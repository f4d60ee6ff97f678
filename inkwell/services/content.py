"""
Content service - CRUD over the ``content`` collection.

Every record is addressed by id or by its slug. The slug is unique across
the collection: the service checks before writing so the caller gets a
clear error, and the store's unique index rejects whatever slips through
concurrently.

Responses embed the author, looked up by ``author_id`` at read time. A
deleted author shows up as ``author: None``.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from inkwell.auth.capabilities import can_modify
from inkwell.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    describe_errors,
)
from inkwell.core.models import Content, ContentStatus, Page, User
from inkwell.core.slugs import generate_slug
from inkwell.core.utils import utc_now
from inkwell.services.users import UserService
from inkwell.storage import Collections, DuplicateKeyError, StorageProvider

logger = logging.getLogger(__name__)

SLUG_TAKEN = "A post with this slug already exists"

# Fields a client may change with an update
EDITABLE_FIELDS = ("title", "slug", "body", "category", "tags", "status")


def parse_tags(tags: str | None) -> list[str]:
    """'news, tech,,' -> ['news', 'tech']"""
    if not tags:
        return []
    return [t.strip() for t in tags.split(",") if t.strip()]


class ContentService:
    """Create, read, update and delete content records."""

    def __init__(self, storage: StorageProvider, users: UserService):
        self.storage = storage
        self.users = users

    async def initialize(self) -> None:
        await self.storage.metadata.ensure_unique(Collections.CONTENT, "slug")

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _load(self, content_id: str) -> Content:
        doc = await self.storage.metadata.get(Collections.CONTENT, content_id)
        if not doc:
            raise NotFoundError("Content not found")
        return Content.model_validate(doc)

    async def _slug_taken(self, slug: str) -> bool:
        return await self.storage.metadata.find_one(Collections.CONTENT, {"slug": slug}) is not None

    async def _view(self, content: Content) -> dict[str, Any]:
        return content.view(await self.users.get_user(content.author_id))

    async def _views(self, contents: list[Content]) -> list[dict[str, Any]]:
        authors: dict[str, User | None] = {}
        for content in contents:
            if content.author_id not in authors:
                authors[content.author_id] = await self.users.get_user(content.author_id)
        return [c.view(authors[c.author_id]) for c in contents]

    # =========================================================================
    # Operations
    # =========================================================================

    async def create(
        self,
        actor: User,
        title: str | None,
        body: str | None,
        category: str | None,
        tags: list[str] | None = None,
        slug: str | None = None,
        status: ContentStatus | str | None = None,
    ) -> dict[str, Any]:
        """Create a record authored by ``actor``; derives the slug from the title if none given."""
        if not title or not body or not category:
            raise ValidationError("Please provide all required fields: title, body, category")

        final_slug = generate_slug(slug or title)
        if not final_slug:
            raise ValidationError("Could not derive a slug; provide one containing letters or digits")

        if await self._slug_taken(final_slug):
            raise ConflictError(SLUG_TAKEN)

        try:
            content = Content(
                title=title,
                slug=final_slug,
                body=body,
                category=category,
                tags=tags or [],
                author_id=actor.id,
                status=status or ContentStatus.DRAFT,
            )
        except PydanticValidationError as e:
            raise ValidationError(describe_errors(e.errors()))

        try:
            await self.storage.metadata.insert(Collections.CONTENT, content.id, content.model_dump())
        except DuplicateKeyError as e:
            if e.field == "slug":
                raise ConflictError(SLUG_TAKEN)
            raise

        logger.info(f"Content {content.id} ({content.slug}) created by {actor.id}")
        return await self._view(content)

    async def list_content(
        self,
        category: str | None = None,
        status: ContentStatus | str | None = None,
        tags: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page:
        """
        Newest first, filtered by exact category/status and any-of tags.

        ``tags`` is the raw comma-separated query value.
        """
        filters: dict[str, Any] = {}
        if category:
            filters["category"] = category
        if status:
            try:
                filters["status"] = ContentStatus(status).value
            except ValueError:
                raise ValidationError(f"Invalid status: {status}")
        tag_list = parse_tags(tags)
        if tag_list:
            filters["tags"] = {"$in": tag_list}

        docs = await self.storage.metadata.query(
            Collections.CONTENT,
            filters=filters,
            limit=limit,
            offset=Page.offset(page, limit),
            sort=[("created_at", -1)],
        )
        total = await self.storage.metadata.count(Collections.CONTENT, filters)

        items = await self._views([Content.model_validate(d) for d in docs])
        return Page(items=items, total=total, page=page, limit=limit)

    async def get_by_slug(self, slug: str) -> dict[str, Any]:
        doc = await self.storage.metadata.find_one(Collections.CONTENT, {"slug": slug.lower()})
        if not doc:
            raise NotFoundError("Content not found")
        return await self._view(Content.model_validate(doc))

    async def get_by_id(self, content_id: str) -> dict[str, Any]:
        return await self._view(await self._load(content_id))

    async def update(self, content_id: str, fields: dict[str, Any], actor: User) -> dict[str, Any]:
        """
        Apply a partial update.

        Keys missing from ``fields`` (or set to None) are left alone. A new
        slug is normalised and must not belong to another record; changing
        the title never touches the slug.
        """
        content = await self._load(content_id)
        if not can_modify(actor, content):
            raise AuthorizationError("Not authorized to update this content")

        updates = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None}

        if "slug" in updates:
            new_slug = generate_slug(updates["slug"])
            if not new_slug:
                raise ValidationError("Slug must contain letters or digits")
            if new_slug != content.slug and await self._slug_taken(new_slug):
                raise ConflictError(SLUG_TAKEN)
            updates["slug"] = new_slug

        try:
            updated = Content.model_validate(
                {**content.model_dump(), **updates, "updated_at": utc_now()}
            )
        except PydanticValidationError as e:
            raise ValidationError(describe_errors(e.errors()))

        try:
            await self.storage.metadata.update(Collections.CONTENT, content.id, updated.model_dump())
        except DuplicateKeyError as e:
            if e.field == "slug":
                raise ConflictError(SLUG_TAKEN)
            raise

        logger.info(f"Content {content.id} updated by {actor.id}: {sorted(updates)}")
        return await self._view(updated)

    async def delete(self, content_id: str, actor: User) -> None:
        content = await self._load(content_id)
        if not can_modify(actor, content):
            raise AuthorizationError("Not authorized to delete this content")

        await self.storage.metadata.delete(Collections.CONTENT, content.id)
        logger.info(f"Content {content.id} deleted by {actor.id}")
