"""
Shared utility functions for the inkwell backend.

This module contains common utilities used across the codebase.
"""

from __future__ import annotations

import secrets
import string
import time
import uuid
from datetime import datetime, timezone

_BASE36 = string.digits + string.ascii_lowercase


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.
    
    Args:
        prefix: Optional prefix (e.g., "user", "content")
        
    Returns:
        A unique ID like "user_a1b2c3d4e5f6"
    """
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def generate_user_handle() -> str:
    """
    Generate the human-readable user handle.
    
    Returns:
        A handle like "USER-1760875200000-k3j9x0q2m"
    """
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"USER-{millis}-{suffix}"


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)
