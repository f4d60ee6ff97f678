"""
User service - registration, login and the admin user surface.

Owns the ``users`` collection. Email uniqueness is checked up front for a
friendly error and enforced by the store's unique index on write.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from inkwell.auth.jwt import (
    TokenClaims,
    TokenError,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from inkwell.config import Settings
from inkwell.core.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    ValidationError,
    describe_errors,
)
from inkwell.core.models import Page, User, UserRoles
from inkwell.core.utils import generate_id, generate_user_handle, utc_now
from inkwell.storage import Collections, DuplicateKeyError, StorageProvider

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

INVALID_CREDENTIALS = "Invalid credentials"
EMAIL_TAKEN = "User with this email already exists"
EMAIL_IN_USE = "Email already in use"

# Checked against when the email is unknown, so both login failures cost the same
_DUMMY_HASH = hash_password("inkwell-dummy-password")


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class UserService:
    """Credential store and session issuer."""

    def __init__(self, storage: StorageProvider, settings: Settings):
        self.storage = storage
        self.settings = settings

    async def initialize(self) -> None:
        await self.storage.metadata.ensure_unique(Collections.USERS, "email")
        await self.storage.metadata.ensure_unique(Collections.USERS, "user_id")

    # =========================================================================
    # Lookups
    # =========================================================================

    async def get_user(self, user_id: str) -> User | None:
        doc = await self.storage.metadata.get(Collections.USERS, user_id)
        return User.model_validate(doc) if doc else None

    async def get_by_email(self, email: str) -> User | None:
        doc = await self.storage.metadata.find_one(
            Collections.USERS, {"email": email.strip().lower()}
        )
        return User.model_validate(doc) if doc else None

    async def require_user(self, user_id: str) -> User:
        user = await self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list_users(self, page: int = 1, limit: int = 10) -> Page:
        """Newest first."""
        docs = await self.storage.metadata.query(
            Collections.USERS,
            limit=limit,
            offset=Page.offset(page, limit),
            sort=[("created_at", -1)],
        )
        total = await self.storage.metadata.count(Collections.USERS)
        return Page(
            items=[User.model_validate(d) for d in docs],
            total=total,
            page=page,
            limit=limit,
        )

    # =========================================================================
    # Sessions
    # =========================================================================

    async def register(
        self,
        name: str | None,
        email: str | None,
        password: str | None,
        is_admin: bool = False,
        roles: dict[str, Any] | None = None,
    ) -> tuple[str, User]:
        """Create a user and issue its first token."""
        if not name or not email or not password:
            raise ValidationError("Please provide name, email, and password")
        _check_password(password)

        if await self.get_by_email(email):
            raise ConflictError(EMAIL_TAKEN)

        password_hash = await asyncio.to_thread(hash_password, password)
        try:
            user = User(
                name=name,
                email=email,
                password_hash=password_hash,
                is_admin=is_admin,
                roles=UserRoles(**(roles or {})),
            )
        except PydanticValidationError as e:
            raise ValidationError(describe_errors(e.errors()))

        user = await self._insert(user)

        logger.info(f"Registered user {user.id} ({user.email})")
        return create_access_token(user, self.settings), user

    async def _insert(self, user: User) -> User:
        """
        Store a new user.

        A clash on email means a concurrent registration won the race. A
        clash on a generated key (id or handle) gets fresh keys and one
        more attempt.
        """
        for attempt in range(2):
            try:
                await self.storage.metadata.insert(Collections.USERS, user.id, user.model_dump())
                return user
            except DuplicateKeyError as e:
                if e.field == "email":
                    raise ConflictError(EMAIL_TAKEN)
                if attempt:
                    raise ConflictError(f"Could not allocate a unique {e.field}, please retry")
                logger.warning(f"Generated {e.field} {e.value!r} already taken, regenerating")
                user = user.model_copy(
                    update={"id": generate_id("user"), "user_id": generate_user_handle()}
                )
        return user

    async def login(self, email: str | None, password: str | None) -> tuple[str, User]:
        """
        Check credentials and issue a token.

        Unknown email and wrong password fail with the same message and the
        same hashing cost, so neither the response nor its timing reveals
        which accounts exist.
        """
        if not email or not password:
            raise ValidationError("Please provide email and password")

        user = await self.get_by_email(email)
        password_hash = user.password_hash if user else _DUMMY_HASH
        valid = await asyncio.to_thread(verify_password, password, password_hash)
        if user is None or not valid:
            logger.warning(f"Failed login for {email.strip().lower()}")
            raise AuthError(INVALID_CREDENTIALS)

        logger.info(f"User {user.id} logged in")
        return create_access_token(user, self.settings), user

    def verify(self, token: str) -> TokenClaims:
        try:
            return decode_token(token, self.settings)
        except TokenError as e:
            logger.debug(f"Token rejected: {e}")
            raise AuthError("Not authorized, token failed or expired")

    # =========================================================================
    # Admin operations
    # =========================================================================

    async def ensure_admin(self, name: str, email: str, password: str) -> User:
        """
        Make sure an admin account exists for ``email``.

        Creates it if missing, promotes it if present. The password of an
        existing account is left untouched.
        """
        existing = await self.get_by_email(email)
        if existing is None:
            _, user = await self.register(name, email, password, is_admin=True)
            logger.info(f"Created admin account {user.email}")
            return user
        if not existing.is_admin:
            existing = await self.update_user(existing.id, {"is_admin": True})
            logger.info(f"Promoted {existing.email} to admin")
        return existing

    async def update_user(self, user_id: str, fields: dict[str, Any]) -> User:
        """
        Apply a partial update.

        Only keys present in ``fields`` change; ``roles`` is merged flag by
        flag and a new password is hashed before it is stored.
        """
        user = await self.require_user(user_id)
        updates: dict[str, Any] = {}

        if fields.get("name") is not None:
            updates["name"] = fields["name"]

        if fields.get("email"):
            email = fields["email"].strip().lower()
            existing = await self.get_by_email(email)
            if existing and existing.id != user.id:
                raise ConflictError(EMAIL_IN_USE)
            updates["email"] = email

        if fields.get("password"):
            _check_password(fields["password"])
            updates["password_hash"] = await asyncio.to_thread(hash_password, fields["password"])

        if fields.get("is_admin") is not None:
            updates["is_admin"] = fields["is_admin"]

        if fields.get("roles"):
            flags = {k: v for k, v in fields["roles"].items() if v is not None}
            updates["roles"] = {**user.roles.model_dump(), **flags}

        try:
            updated = User.model_validate(
                {**user.model_dump(), **updates, "updated_at": utc_now()}
            )
        except PydanticValidationError as e:
            raise ValidationError(describe_errors(e.errors()))

        try:
            await self.storage.metadata.update(Collections.USERS, user.id, updated.model_dump())
        except DuplicateKeyError as e:
            if e.field == "email":
                raise ConflictError(EMAIL_IN_USE)
            raise

        logger.info(f"Updated user {user.id}: {sorted(updates)}")
        return updated

    async def delete_user(self, user_id: str) -> None:
        """Remove the user. Their content stays and shows a null author."""
        if not await self.storage.metadata.delete(Collections.USERS, user_id):
            raise NotFoundError("User not found")
        logger.info(f"Deleted user {user_id}")
