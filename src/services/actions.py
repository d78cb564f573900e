"""
Request-dispatch layer for user and message actions.

Translates an enumerated action into repository calls and returns a
tagged ``ActionResult``. Lookups by primary key that miss come back as
``ActionStatus.FAILURE`` with a fixed message; database errors are not
caught here and propagate to the caller.

Responsibility: Map API operations onto database CRUD
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import MessageModel, UserModel
from src.db.repositories import MessageRepository, UserRepository

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
MESSAGE_NOT_FOUND = "Message not found"
PARENT_NOT_FOUND = "Parent message not found"
EMPTY_NAME = "Name must not be empty"
INVERTED_RANGE = "Invalid time range: start is after end"


class UserActionKind(str, Enum):
    CREATE = "create"
    GET = "get"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"


class MessageActionKind(str, Enum):
    CREATE = "create"
    GET = "get"
    UPDATE = "update"
    DELETE = "delete"
    LIST_BY_USER = "list_by_user"
    LIST_IN_TIME_RANGE = "list_in_time_range"


@dataclass(frozen=True, slots=True)
class UserAction:
    """A single user operation and its payload."""

    kind: UserActionKind
    user_id: Optional[int] = None
    name: Optional[str] = None
    limit: int = 20
    offset: int = 0

    @classmethod
    def create(cls, name: str) -> "UserAction":
        return cls(UserActionKind.CREATE, name=name)

    @classmethod
    def get(cls, user_id: int) -> "UserAction":
        return cls(UserActionKind.GET, user_id=user_id)

    @classmethod
    def update(cls, user_id: int, name: str) -> "UserAction":
        return cls(UserActionKind.UPDATE, user_id=user_id, name=name)

    @classmethod
    def delete(cls, user_id: int) -> "UserAction":
        return cls(UserActionKind.DELETE, user_id=user_id)

    @classmethod
    def list(cls, limit: int = 20, offset: int = 0) -> "UserAction":
        return cls(UserActionKind.LIST, limit=limit, offset=offset)


@dataclass(frozen=True, slots=True)
class MessageAction:
    """A single message operation and its payload."""

    kind: MessageActionKind
    message_id: Optional[int] = None
    user_id: Optional[int] = None
    content: Optional[str] = None
    parent_id: Optional[int] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        user_id: int,
        content: str,
        parent_id: Optional[int] = None
    ) -> "MessageAction":
        return cls(
            MessageActionKind.CREATE,
            user_id=user_id,
            content=content,
            parent_id=parent_id,
        )

    @classmethod
    def get(cls, message_id: int) -> "MessageAction":
        return cls(MessageActionKind.GET, message_id=message_id)

    @classmethod
    def update(cls, message_id: int, content: str) -> "MessageAction":
        return cls(MessageActionKind.UPDATE, message_id=message_id, content=content)

    @classmethod
    def delete(cls, message_id: int) -> "MessageAction":
        return cls(MessageActionKind.DELETE, message_id=message_id)

    @classmethod
    def for_user(cls, user_id: int) -> "MessageAction":
        return cls(MessageActionKind.LIST_BY_USER, user_id=user_id)

    @classmethod
    def in_time_range(
        cls,
        user_id: int,
        start: datetime,
        end: datetime
    ) -> "MessageAction":
        return cls(
            MessageActionKind.LIST_IN_TIME_RANGE,
            user_id=user_id,
            start=start,
            end=end,
        )


class ActionStatus(Enum):
    """Tag of an ``ActionResult``."""

    SUCCESS = "success"
    FAILURE = "failure"
    USER = "user"
    USERS = "users"
    MESSAGE = "message"
    MESSAGES = "messages"


@dataclass(slots=True)
class ActionResult:
    """Outcome of a dispatched action."""

    status: ActionStatus
    error: Optional[str] = None
    affected_id: Optional[int] = None
    user: Optional[UserModel] = None
    message: Optional[MessageModel] = None
    users: List[UserModel] = field(default_factory=list)
    messages: List[MessageModel] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is not ActionStatus.FAILURE

    @classmethod
    def success(cls, affected_id: Optional[int] = None) -> "ActionResult":
        return cls(ActionStatus.SUCCESS, affected_id=affected_id)

    @classmethod
    def failure(cls, error: str) -> "ActionResult":
        return cls(ActionStatus.FAILURE, error=error)

    @classmethod
    def for_user(cls, user: UserModel) -> "ActionResult":
        return cls(ActionStatus.USER, user=user, affected_id=user.id)

    @classmethod
    def for_users(cls, users: List[UserModel]) -> "ActionResult":
        return cls(ActionStatus.USERS, users=users)

    @classmethod
    def for_message(cls, message: MessageModel) -> "ActionResult":
        return cls(ActionStatus.MESSAGE, message=message, affected_id=message.id)

    @classmethod
    def for_messages(cls, messages: List[MessageModel]) -> "ActionResult":
        return cls(ActionStatus.MESSAGES, messages=messages)


# --------------------------------------------------------------------------- #
# Users
# --------------------------------------------------------------------------- #


async def handle_user_action(session: AsyncSession, action: UserAction) -> ActionResult:
    """
    Execute a user action against the database.

    Args:
        session: Request-scoped async session
        action: The action to run

    Returns:
        ActionResult tagged USER, USERS, SUCCESS or FAILURE
    """
    repo = UserRepository(session)

    if action.kind is UserActionKind.CREATE:
        name = (action.name or "").strip()
        if not name:
            return ActionResult.failure(EMPTY_NAME)
        user = await repo.create(name)
        await session.commit()
        logger.info(f"User created: ID {user.id}, Name: {user.name}")
        return ActionResult.success(affected_id=user.id)

    if action.kind is UserActionKind.LIST:
        users = await repo.list_all(limit=action.limit, offset=action.offset)
        return ActionResult.for_users(users)

    user = await repo.get_by_id(action.user_id)
    if user is None:
        logger.warning(f"User not found: ID {action.user_id}")
        return ActionResult.failure(USER_NOT_FOUND)

    if action.kind is UserActionKind.GET:
        return ActionResult.for_user(user)

    if action.kind is UserActionKind.UPDATE:
        name = (action.name or "").strip()
        if not name:
            return ActionResult.failure(EMPTY_NAME)
        await repo.update_name(user, name)
        await session.commit()
        logger.info(f"User updated: ID {user.id}, Name: {user.name}")
        return ActionResult.success(affected_id=user.id)

    if action.kind is UserActionKind.DELETE:
        await repo.delete(user)
        await session.commit()
        logger.info(f"User deleted: ID {action.user_id}")
        return ActionResult.success(affected_id=action.user_id)

    raise ValueError(f"Unsupported user action: {action.kind}")


# --------------------------------------------------------------------------- #
# Messages
# --------------------------------------------------------------------------- #


async def _create_message(session: AsyncSession, action: MessageAction) -> ActionResult:
    users = UserRepository(session)
    messages = MessageRepository(session)

    if await users.get_by_id(action.user_id) is None:
        logger.warning(f"Cannot create message, user not found: ID {action.user_id}")
        return ActionResult.failure(USER_NOT_FOUND)

    if action.parent_id is not None and await messages.get_by_id(action.parent_id) is None:
        logger.warning(f"Cannot create reply, parent not found: ID {action.parent_id}")
        return ActionResult.failure(PARENT_NOT_FOUND)

    message = await messages.create(
        user_id=action.user_id,
        content=action.content or "",
        parent_id=action.parent_id,
    )
    await session.commit()
    logger.info(f"Message created: ID {message.id}, User ID {message.user_id}")
    return ActionResult.success(affected_id=message.id)


async def handle_message_action(session: AsyncSession, action: MessageAction) -> ActionResult:
    """
    Execute a message action against the database.

    Args:
        session: Request-scoped async session
        action: The action to run

    Returns:
        ActionResult tagged MESSAGE, MESSAGES, SUCCESS or FAILURE
    """
    repo = MessageRepository(session)

    if action.kind is MessageActionKind.CREATE:
        return await _create_message(session, action)

    if action.kind is MessageActionKind.LIST_BY_USER:
        return ActionResult.for_messages(await repo.list_by_user(action.user_id))

    if action.kind is MessageActionKind.LIST_IN_TIME_RANGE:
        if action.start > action.end:
            return ActionResult.failure(INVERTED_RANGE)
        found = await repo.list_by_user_in_range(action.user_id, action.start, action.end)
        logger.info(
            f"Messages in time range for user {action.user_id}: "
            f"{len(found)} between {action.start.isoformat()} and {action.end.isoformat()}"
        )
        return ActionResult.for_messages(found)

    message = await repo.get_by_id(action.message_id)
    if message is None:
        logger.warning(f"Message not found: ID {action.message_id}")
        return ActionResult.failure(MESSAGE_NOT_FOUND)

    if action.kind is MessageActionKind.GET:
        return ActionResult.for_message(message)

    if action.kind is MessageActionKind.UPDATE:
        await repo.update_content(message, action.content or "")
        await session.commit()
        logger.info(f"Message updated: ID {message.id}")
        return ActionResult.success(affected_id=message.id)

    if action.kind is MessageActionKind.DELETE:
        await repo.delete(message)
        await session.commit()
        logger.info(f"Message deleted: ID {action.message_id}")
        return ActionResult.success(affected_id=action.message_id)

    raise ValueError(f"Unsupported message action: {action.kind}")
