"""
Error taxonomy.

Services raise these; the API layer turns them into failure envelopes
with the matching HTTP status.
"""

from __future__ import annotations

from typing import Any, Sequence


class AppError(Exception):
    """Base class for errors that end a request with a failure envelope."""
    
    status_code: int = 500
    default_message: str = "Server error"
    
    def __init__(self, message: str | None = None, error: Any = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = 400
    default_message = "Invalid request"


class ConflictError(AppError):
    """A unique key is already taken."""
    status_code = 400
    default_message = "Resource already exists"


class AuthError(AppError):
    """Bad credentials or bad token."""
    status_code = 401
    default_message = "Not authorized"


class AuthorizationError(AppError):
    """Authenticated, but not allowed to do this."""
    status_code = 403
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class UnexpectedError(AppError):
    status_code = 500
    default_message = "Something went wrong!"


def describe_errors(errors: Sequence[dict[str, Any]]) -> str:
    """
    One line describing the first problem in a pydantic error list.
    
    [{"loc": ("body", "title"), "msg": "Field required"}] -> "title: Field required"
    """
    if not errors:
        return "Invalid input"
    first = errors[0]
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    msg = first.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg
