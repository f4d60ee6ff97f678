"""
Authentication and authorization.

- jwt.py: password hashing, token issue and verification
- capabilities.py: what a user may do (pure predicates)
- context.py: the authenticated actor of a request
- policies.py: FastAPI dependencies that gate routes
- routes.py: the /api/user router

Import policies and routes from their modules; they depend on the
service layer, which itself imports from this package.
"""

from inkwell.auth.capabilities import (
    Capability,
    can_modify,
    get_capabilities,
    has_content_access,
    has_product_access,
    is_admin,
)
from inkwell.auth.context import AuthContext
from inkwell.auth.jwt import (
    TokenClaims,
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)

__all__ = [
    "AuthContext",
    "Capability",
    "can_modify",
    "get_capabilities",
    "has_content_access",
    "has_product_access",
    "is_admin",
    # JWT
    "TokenClaims",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "create_access_token",
    "decode_token",
    "hash_password",
    "verify_password",
]
