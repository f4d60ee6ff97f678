"""
Slug derivation.

A slug is the lowercase, URL-safe identifier of a content record.
"""

from __future__ import annotations

import re

_DISALLOWED = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-{2,}")


def generate_slug(text: str) -> str:
    """
    Turn a title (or a user-supplied slug) into a slug.
    
    "Hello, World!!" -> "hello-world"
    
    Applying it to its own output returns the same string.
    """
    slug = _DISALLOWED.sub("", text.lower())
    slug = _WHITESPACE.sub("-", slug.strip())
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")
