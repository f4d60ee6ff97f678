"""
Policies - the authorization gate in front of protected routes.

Every protected route depends on ``authenticate`` (directly or through a
policy), then optionally on a capability policy:

    @router.post("")
    async def create(ctx: AuthContext = Depends(require_content_access)):
        ...

Design:
- ``authenticate`` reads the bearer token, verifies it and loads the live
  user; any failure is a 401
- ``require()`` returns a dependency that runs ``authenticate`` first and
  then checks capabilities; a missing capability is a 403
- Checks read the freshly loaded user, never the claims baked into the token
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from inkwell.api.deps import get_user_service
from inkwell.auth.capabilities import Capability
from inkwell.auth.context import AuthContext
from inkwell.core.errors import AuthError
from inkwell.integrations.sentry import set_user
from inkwell.services.users import UserService


# =============================================================================
# Authentication
# =============================================================================


# Doesn't fail by itself if no token; authenticate() decides
optional_bearer = HTTPBearer(auto_error=False)


async def authenticate(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    users: UserService = Depends(get_user_service),
) -> AuthContext:
    """Resolve the bearer token to a live user or fail with 401."""
    if not credentials or not credentials.credentials:
        raise AuthError("Not authorized to access this route. Please login.")

    claims = users.verify(credentials.credentials)

    user = await users.get_user(claims.sub)
    if user is None:
        raise AuthError("User not found")

    set_user(user.id, user.email)
    return AuthContext(user=user)


# =============================================================================
# Policy - the core authorization type
# =============================================================================


class Policy:
    """
    A set of capabilities a request must hold, all of them.

        require(Capability.ADMIN)
        require(Capability.CONTENT_ACCESS, Capability.PRODUCT_ACCESS)
    """

    def __init__(self, capabilities: list[Capability] | None = None):
        self.capabilities = capabilities or []

    def check(self, ctx: AuthContext) -> None:
        """Raise AuthorizationError naming the first missing capability."""
        for capability in self.capabilities:
            ctx.require(capability)


# =============================================================================
# Main Interface - the require() function
# =============================================================================


def require(*capabilities: Capability) -> Callable:
    """
    Require capabilities (all of them) to access a route.

    Returns:
        FastAPI dependency that resolves to AuthContext
    """
    policy = Policy(capabilities=list(capabilities))

    async def dependency(ctx: AuthContext = Depends(authenticate)) -> AuthContext:
        policy.check(ctx)
        return ctx

    return dependency


require_admin = require(Capability.ADMIN)
require_content_access = require(Capability.CONTENT_ACCESS)
require_product_access = require(Capability.PRODUCT_ACCESS)
