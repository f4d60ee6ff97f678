"""
Core data models for the inkwell backend.

These models represent the two stored entities: Users and Content.
Content points at its author by ``User.id`` and resolves the author
at read time.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from inkwell.core.utils import generate_id, generate_user_handle, utc_now


# =============================================================================
# Enums
# =============================================================================


class ContentStatus(str, Enum):
    """Publication status of a content record."""
    
    DRAFT = "draft"
    PUBLISHED = "published"


# =============================================================================
# User
# =============================================================================


class UserRoles(BaseModel):
    """Capability flags granted to a non-admin user."""
    
    access_content: bool = False
    access_product: bool = False


class User(BaseModel):
    """
    A registered user.
    
    ``password_hash`` is a one-way PBKDF2 hash and is excluded from every
    view returned to clients.
    """
    
    model_config = ConfigDict(str_strip_whitespace=True)
    
    id: str = Field(default_factory=lambda: generate_id("user"))
    user_id: str = Field(default_factory=generate_user_handle)
    
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password_hash: str
    
    is_admin: bool = False
    roles: UserRoles = Field(default_factory=UserRoles)
    
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    
    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.lower()
    
    def public_view(self, include_timestamps: bool = False) -> dict[str, Any]:
        """The user as clients see it (never includes the hash)."""
        exclude = {"password_hash"}
        if not include_timestamps:
            exclude |= {"created_at", "updated_at"}
        return self.model_dump(mode="json", exclude=exclude)
    
    def author_view(self) -> dict[str, Any]:
        """The subset embedded as ``author`` in content responses."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
        }


# =============================================================================
# Content
# =============================================================================


class Content(BaseModel):
    """
    A content record, addressed by id or by its unique slug.
    
    ``author_id`` is a weak reference: the user may have been deleted
    since, in which case the resolved author is ``None``.
    """
    
    model_config = ConfigDict(use_enum_values=True, validate_default=True)
    
    id: str = Field(default_factory=lambda: generate_id("content"))
    
    title: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1)
    body: str = Field(min_length=1)
    category: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    
    author_id: str
    status: ContentStatus = ContentStatus.DRAFT
    
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    
    @field_validator("title", "category", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v
    
    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if t and t.strip()]
    
    def view(self, author: User | None) -> dict[str, Any]:
        """Serialize with the resolved author (or ``None``)."""
        return {
            **self.model_dump(mode="json"),
            "author": author.author_view() if author else None,
        }


# =============================================================================
# Pagination
# =============================================================================


class Page(BaseModel):
    """One page of a listing plus the numbers needed to navigate it."""
    
    items: list[Any]
    total: int
    page: int
    limit: int
    
    @property
    def count(self) -> int:
        return len(self.items)
    
    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
    
    @staticmethod
    def offset(page: int, limit: int) -> int:
        return (page - 1) * limit
