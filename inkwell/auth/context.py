"""
Auth context - the "who can do what" for each request.

This is the lightweight object passed to route handlers once the
request has been authenticated. It contains everything needed to make
authorization decisions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from inkwell.auth.capabilities import DENIED_MESSAGES, Capability, get_capabilities
from inkwell.core.errors import AuthorizationError
from inkwell.core.models import User


@dataclass
class AuthContext:
    """
    Authorization context for a request.
    
    Usage in routes:
        async def create_content(ctx: AuthContext = Depends(require_content_access)):
            await content.create(ctx.user, ...)
    
    ``ctx.user`` is the live user record, loaded after the token checked out.
    """
    
    user: User
    
    # Computed capabilities (cached)
    _capabilities: set[Capability] = field(default_factory=set, repr=False)
    
    def __post_init__(self):
        self._capabilities = get_capabilities(self.user)
    
    def can(self, capability: Capability | str) -> bool:
        """
        Check if user has a capability.
        
        Usage:
            if ctx.can("content.access"):
                # do something
        """
        if isinstance(capability, str):
            try:
                capability = Capability(capability)
            except ValueError:
                return False
        return capability in self._capabilities
    
    def require(self, capability: Capability) -> None:
        """Raise AuthorizationError if user doesn't have capability."""
        if not self.can(capability):
            raise AuthorizationError(DENIED_MESSAGES[capability])
