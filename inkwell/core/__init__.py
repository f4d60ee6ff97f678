"""
Core domain types shared by every layer.
"""

from inkwell.core.errors import (
    AppError,
    AuthError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from inkwell.core.models import Content, ContentStatus, Page, User, UserRoles
from inkwell.core.slugs import generate_slug

__all__ = [
    "AppError",
    "AuthError",
    "AuthorizationError",
    "ConflictError",
    "NotFoundError",
    "UnexpectedError",
    "ValidationError",
    "Content",
    "ContentStatus",
    "Page",
    "User",
    "UserRoles",
    "generate_slug",
]
