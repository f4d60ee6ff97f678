"""
Response envelopes.

Success: {"success": true, "message"?: ..., <payload>}
Failure: {"success": false, "message": ..., "error"?: ...}
"""

from __future__ import annotations

from typing import Any

from inkwell.core.models import Page


def ok(message: str | None = None, **payload: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body.update(payload)
    return body


def paginated(page: Page, key: str = "data", items: list[Any] | None = None) -> dict[str, Any]:
    """Envelope for a listing; ``items`` overrides the page's own items (e.g. rendered views)."""
    return ok(
        count=page.count,
        total=page.total,
        page=page.page,
        pages=page.pages,
        **{key: page.items if items is None else items},
    )


def failure(message: str, error: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body
