"""
FastAPI dependencies that hand out the objects created at startup.

Everything lives on ``app.state``; nothing is imported as a global.
"""

from __future__ import annotations

from fastapi import Request

from inkwell.services.content import ContentService
from inkwell.services.users import UserService


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content_service
