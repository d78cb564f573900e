"""
Repository package for data access operations.

Implements repository pattern for abstracting database operations.
"""

from .user_repository import UserRepository
from .message_repository import MessageRepository

__all__ = [
    "UserRepository",
    "MessageRepository",
]
