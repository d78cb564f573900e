"""
GraphQL Resolvers and DataLoaders
==================================
Request context, argument parsing and DataLoaders for N+1 prevention.

Features:
    - DataLoaders for batched loading of nested user/message fields
    - One asyncio.Lock per request so sibling resolvers never drive the
      shared AsyncSession concurrently
    - ID and datetime argument parsing with client-facing error messages

Responsibility: GraphQL data fetching and batching
"""

import asyncio
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from graphql import GraphQLError
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.dataloader import DataLoader

from src.db.models import MessageModel, UserModel
from src.db.repositories import MessageRepository, UserRepository


# --------------------------------------------------------------------------- #
# Argument parsing
# --------------------------------------------------------------------------- #


_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1


def parse_id(value: Any) -> int:
    """
    Convert a GraphQL ``ID`` argument to an integer primary key.

    Only plain decimal strings inside the 32-bit ``INTEGER`` column range
    are accepted, so bad IDs fail here instead of in the driver.
    """
    text = str(value)
    if not _ID_PATTERN.fullmatch(text):
        raise GraphQLError(f"Invalid ID: {value}")
    parsed = int(text)
    if not _INT32_MIN <= parsed <= _INT32_MAX:
        raise GraphQLError(f"Invalid ID: {value}")
    return parsed


def parse_datetime(value: str, label: str) -> datetime:
    """
    Parse an ISO-8601 / RFC 3339 argument into naive UTC.

    A trailing ``Z`` is accepted; values without an offset are taken
    as UTC already.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise GraphQLError(f"Invalid {label} datetime: {exc}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a stored naive timestamp for output."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# --------------------------------------------------------------------------- #
# DataLoader factory functions
# --------------------------------------------------------------------------- #


def get_user_loader(db: AsyncSession, lock: asyncio.Lock) -> DataLoader:
    """Create DataLoader for users by ID"""

    async def load_users(ids: List[int]) -> List[Optional[UserModel]]:
        async with lock:
            users = await UserRepository(db).get_many(list(ids))

        user_map = {user.id: user for user in users}
        return [user_map.get(id) for id in ids]

    return DataLoader(load_fn=load_users)


def get_message_loader(db: AsyncSession, lock: asyncio.Lock) -> DataLoader:
    """Create DataLoader for messages by ID"""

    async def load_messages(ids: List[int]) -> List[Optional[MessageModel]]:
        async with lock:
            messages = await MessageRepository(db).get_many(list(ids))

        message_map = {m.id: m for m in messages}
        return [message_map.get(id) for id in ids]

    return DataLoader(load_fn=load_messages)


def get_messages_by_user_loader(db: AsyncSession, lock: asyncio.Lock) -> DataLoader:
    """Create DataLoader for messages by user_id"""

    async def load_messages_by_user(user_ids: List[int]) -> List[List[MessageModel]]:
        async with lock:
            messages = await MessageRepository(db).list_by_users(list(user_ids))

        # Group by user_id
        messages_by_user: Dict[int, List[MessageModel]] = {}
        for message in messages:
            messages_by_user.setdefault(message.user_id, []).append(message)

        return [messages_by_user.get(user_id, []) for user_id in user_ids]

    return DataLoader(load_fn=load_messages_by_user)


def get_replies_loader(db: AsyncSession, lock: asyncio.Lock) -> DataLoader:
    """Create DataLoader for replies by parent_id"""

    async def load_replies(parent_ids: List[int]) -> List[List[MessageModel]]:
        async with lock:
            replies = await MessageRepository(db).list_replies(list(parent_ids))

        # Group by parent_id
        replies_by_parent: Dict[int, List[MessageModel]] = {}
        for reply in replies:
            replies_by_parent.setdefault(reply.parent_id, []).append(reply)

        return [replies_by_parent.get(parent_id, []) for parent_id in parent_ids]

    return DataLoader(load_fn=load_replies)


# --------------------------------------------------------------------------- #
# Context
# --------------------------------------------------------------------------- #


def build_context(db: AsyncSession, **extra: Any) -> Dict[str, Any]:
    """
    Build the per-request GraphQL context.

    Args:
        db: Request-scoped session shared by every resolver
        **extra: Additional entries (e.g. ``request``)

    Returns:
        Context dict with ``db``, ``lock`` and ``loaders``
    """
    lock = asyncio.Lock()
    return {
        "db": db,
        "lock": lock,
        "loaders": {
            "user": get_user_loader(db, lock),
            "message": get_message_loader(db, lock),
            "messages_by_user": get_messages_by_user_loader(db, lock),
            "replies": get_replies_loader(db, lock),
        },
        **extra,
    }
