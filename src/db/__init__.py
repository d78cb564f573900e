"""
Database package for Threadline.

Provides ORM models, session management, and repository pattern
for data persistence.
"""

from .models import Base, UserModel, MessageModel
from .session import Database, db, get_db

__all__ = [
    "Base",
    "UserModel",
    "MessageModel",
    "Database",
    "db",
    "get_db",
]
