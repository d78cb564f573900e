"""
Repository for message database operations.

Handles CRUD operations, per-user listings, time-range lookups and
reply-thread traversal for the ``messages`` table.

Responsibility: Database access layer for messages
"""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import MessageModel, utcnow

logger = logging.getLogger(__name__)


class MessageRepository:
    """
    Repository for message database operations.

    Provides methods for creating, reading, updating, and deleting
    message records, plus the filtered listings the API exposes.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, message_id: int) -> Optional[MessageModel]:
        """
        Get a message by ID.

        Args:
            message_id: Message ID

        Returns:
            MessageModel or None if not found
        """
        stmt = select(MessageModel).where(MessageModel.id == message_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, message_ids: List[int]) -> List[MessageModel]:
        """Fetch every message whose id is in ``message_ids``."""
        if not message_ids:
            return []
        stmt = select(MessageModel).where(MessageModel.id.in_(message_ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self,
        user_id: int,
        content: str,
        parent_id: Optional[int] = None
    ) -> MessageModel:
        """
        Insert a message.

        Args:
            user_id: Owning user ID
            content: Message text
            parent_id: Message this one replies to, if any

        Returns:
            The flushed MessageModel (id populated)
        """
        now = utcnow()
        message = MessageModel(
            user_id=user_id,
            content=content,
            parent_id=parent_id,
            created_at=now,
            updated_at=now
        )
        self.session.add(message)
        await self.session.flush()
        logger.debug("Inserted message %s for user %s", message.id, user_id)
        return message

    async def update_content(self, message: MessageModel, content: str) -> MessageModel:
        """Replace the message text and bump ``updated_at``."""
        message.content = content
        message.updated_at = utcnow()
        await self.session.flush()
        return message

    async def delete(self, message: MessageModel) -> None:
        """Delete a message. Replies go with it through the database cascade."""
        await self.session.delete(message)
        await self.session.flush()

    async def list_by_user(self, user_id: int) -> List[MessageModel]:
        """
        Get every message written by a user, oldest first.

        Args:
            user_id: Owning user ID

        Returns:
            List of MessageModel objects
        """
        stmt = (
            select(MessageModel)
            .where(MessageModel.user_id == user_id)
            .order_by(MessageModel.created_at, MessageModel.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_users(self, user_ids: List[int]) -> List[MessageModel]:
        """Messages for several users at once, oldest first."""
        if not user_ids:
            return []
        stmt = (
            select(MessageModel)
            .where(MessageModel.user_id.in_(user_ids))
            .order_by(MessageModel.created_at, MessageModel.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_user_in_range(
        self,
        user_id: int,
        start: datetime,
        end: datetime
    ) -> List[MessageModel]:
        """
        Get a user's messages created within a time range.

        Args:
            user_id: Owning user ID
            start: Range start (inclusive, naive UTC)
            end: Range end (inclusive, naive UTC)

        Returns:
            List of MessageModel objects, oldest first
        """
        stmt = (
            select(MessageModel)
            .where(
                and_(
                    MessageModel.user_id == user_id,
                    MessageModel.created_at >= start,
                    MessageModel.created_at <= end
                )
            )
            .order_by(MessageModel.created_at, MessageModel.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_replies(self, parent_ids: List[int]) -> List[MessageModel]:
        """Direct replies to any of ``parent_ids``, oldest first."""
        if not parent_ids:
            return []
        stmt = (
            select(MessageModel)
            .where(MessageModel.parent_id.in_(parent_ids))
            .order_by(MessageModel.created_at, MessageModel.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
