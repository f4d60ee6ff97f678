# =============================================================================
# JWT Authentication Implementation
# =============================================================================
#
# This module provides the session primitives:
#   - Password hashing
#   - Access token creation
#   - Token validation
#
# Tokens carry the user's identity plus the admin flag and role claims.
# Authorization never trusts those claims: the gate reloads the user on
# every request, so revoked roles take effect immediately.
#
# =============================================================================

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from inkwell.config import Settings
from inkwell.core.models import User, UserRoles
from inkwell.core.utils import generate_id, utc_now

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000


# =============================================================================
# Models
# =============================================================================

class TokenClaims(BaseModel):
    """Validated JWT claims."""
    sub: str  # User.id
    user_id: str
    email: str
    is_admin: bool
    roles: UserRoles
    exp: datetime
    iat: datetime
    type: str
    jti: str


# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str) -> str:
    """
    Hash a password using PBKDF2-SHA256.

    Returns: salt:hash format string
    """
    salt = secrets.token_hex(32)
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=PBKDF2_ITERATIONS,
    )
    return f"{salt}:{hash_bytes.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, stored_hash = password_hash.split(':')
    except (ValueError, AttributeError):
        return False

    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=PBKDF2_ITERATIONS,
    )
    return secrets.compare_digest(hash_bytes.hex(), stored_hash)


# =============================================================================
# Token Creation
# =============================================================================

def create_access_token(user: User, settings: Settings) -> str:
    """Create a signed access token for ``user``."""
    now = utc_now()
    expire = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    payload = {
        "sub": user.id,
        "user_id": user.user_id,
        "email": user.email,
        "is_admin": user.is_admin,
        "roles": user.roles.model_dump(),
        "exp": expire,
        "iat": now,
        "type": "access",
        "jti": generate_id("tok"),
    }

    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


# =============================================================================
# Token Validation
# =============================================================================

class TokenError(Exception):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid or malformed."""
    pass


def decode_token(token: str, settings: Settings, expected_type: str = "access") -> TokenClaims:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT string
        settings: Supplies the signing key and algorithm
        expected_type: Value the "type" claim must carry

    Returns:
        TokenClaims with validated claims

    Raises:
        TokenExpiredError: Token has expired
        TokenInvalidError: Token is invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {e}")

    if payload.get("type") != expected_type:
        raise TokenInvalidError(f"Expected {expected_type} token, got {payload.get('type')}")

    try:
        return TokenClaims(
            sub=payload["sub"],
            user_id=payload.get("user_id", ""),
            email=payload.get("email", ""),
            is_admin=payload.get("is_admin", False),
            roles=payload.get("roles") or {},
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            type=payload["type"],
            jti=payload.get("jti", ""),
        )
    except (ValueError, TypeError) as e:
        raise TokenInvalidError(f"Invalid token claims: {e}")
