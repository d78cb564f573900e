"""
GraphQL API Package
===================
Strawberry GraphQL implementation for users and threaded messages.
"""

from .resolvers import build_context
from .schema import schema

__all__ = ["schema", "build_context"]
