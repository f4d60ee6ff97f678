"""
Capabilities and the pure predicates behind them.

This defines WHAT users can do, not HOW we check it.
The actual checking happens in policies.py.
"""

from __future__ import annotations

from enum import Enum

from inkwell.core.models import Content, User


class Capability(str, Enum):
    """
    Named permissions.
    
    Admins hold every capability. Everyone else holds the ones their
    role flags grant.
    """
    
    ADMIN = "admin"
    CONTENT_ACCESS = "content.access"
    PRODUCT_ACCESS = "product.access"


# Message returned with a 403 when a capability is missing
DENIED_MESSAGES: dict[Capability, str] = {
    Capability.ADMIN: "Access denied. Admin privileges required.",
    Capability.CONTENT_ACCESS: "Access denied. Content access permission required.",
    Capability.PRODUCT_ACCESS: "Access denied. Product access permission required.",
}


# =============================================================================
# Predicates
# =============================================================================


def is_admin(user: User) -> bool:
    return user.is_admin


def has_content_access(user: User) -> bool:
    return user.is_admin or user.roles.access_content


def has_product_access(user: User) -> bool:
    return user.is_admin or user.roles.access_product


def can_modify(actor: User, content: Content) -> bool:
    """Only the author of a record or an admin may change or delete it."""
    return actor.is_admin or content.author_id == actor.id


def get_capabilities(user: User | None) -> set[Capability]:
    """All capabilities ``user`` holds (none when anonymous)."""
    if user is None:
        return set()
    
    caps: set[Capability] = set()
    if is_admin(user):
        caps.add(Capability.ADMIN)
    if has_content_access(user):
        caps.add(Capability.CONTENT_ACCESS)
    if has_product_access(user):
        caps.add(Capability.PRODUCT_ACCESS)
    return caps
