"""
Services hold the business rules; routes only translate HTTP to calls.
"""

from inkwell.services.content import ContentService
from inkwell.services.users import UserService

__all__ = ["ContentService", "UserService"]
