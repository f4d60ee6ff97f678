# =============================================================================
# User API Routes
# =============================================================================
#
# Endpoints:
#   POST   /api/user/register  - Create account, returns token
#   POST   /api/user/login     - Get token
#   POST   /api/user/logout    - Acknowledge logout (client discards token)
#   GET    /api/user/me        - Get current user
#
# Admin only:
#   GET    /api/user/all       - Paginated user list
#   GET    /api/user/{id}      - Single user
#   PUT    /api/user/{id}      - Update user
#   DELETE /api/user/{id}      - Delete user
#
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr

from inkwell.api.deps import get_user_service
from inkwell.api.responses import ok, paginated
from inkwell.auth.context import AuthContext
from inkwell.auth.policies import authenticate, require_admin
from inkwell.services.users import UserService

router = APIRouter(prefix="/api/user", tags=["user"])


# =============================================================================
# Request Models
# =============================================================================

# Required fields are optional here so the service can answer with its own
# "please provide ..." message instead of a generic validation error.

class RolesRequest(BaseModel):
    access_content: bool | None = None
    access_product: bool | None = None


class RegisterRequest(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    password: str | None = None
    roles: RolesRequest | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class UpdateUserRequest(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    password: str | None = None
    is_admin: bool | None = None
    roles: RolesRequest | None = None


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    users: UserService = Depends(get_user_service),
):
    """
    Create a new account.

    Admin rights cannot be self-assigned; an admin grants them afterwards.
    """
    roles = data.roles.model_dump(exclude_none=True) if data.roles else None
    token, user = await users.register(data.name, data.email, data.password, roles=roles)
    return ok("User registered successfully", token=token, user=user.public_view())


@router.post("/login")
async def login(
    data: LoginRequest,
    users: UserService = Depends(get_user_service),
):
    """Authenticate and get a token."""
    token, user = await users.login(data.email, data.password)
    return ok("Login successful", token=token, user=user.public_view())


# =============================================================================
# Protected Endpoints
# =============================================================================

@router.post("/logout")
async def logout(ctx: AuthContext = Depends(authenticate)):
    """
    Logout (client should discard the token).

    Tokens are stateless, so there is nothing to revoke server-side.
    """
    return ok("Logout successful. Please remove the token from client.")


@router.get("/me")
async def get_current_user(ctx: AuthContext = Depends(authenticate)):
    """Get the current authenticated user."""
    return ok(user=ctx.user.public_view(include_timestamps=True))


# =============================================================================
# Admin Endpoints
# =============================================================================

@router.get("/all")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    ctx: AuthContext = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    result = await users.list_users(page=page, limit=limit)
    views = [u.public_view(include_timestamps=True) for u in result.items]
    return paginated(result, key="users", items=views)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    ctx: AuthContext = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    user = await users.require_user(user_id)
    return ok(user=user.public_view(include_timestamps=True))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    data: UpdateUserRequest,
    ctx: AuthContext = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    """Partial update: only the fields sent are changed."""
    user = await users.update_user(user_id, data.model_dump(exclude_unset=True))
    return ok("User updated successfully", user=user.public_view())


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    ctx: AuthContext = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    await users.delete_user(user_id)
    return ok("User deleted successfully")
