"""
Repository for user database operations.

Handles CRUD operations for the ``users`` table.

Responsibility: Data access layer for users
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.sql import Select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import UserModel

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository encapsulating persistence for ``UserModel`` records."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        """Fetch a single user by primary key."""
        stmt: Select[UserModel] = select(UserModel).where(UserModel.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, user_ids: List[int]) -> List[UserModel]:
        """Fetch every user whose id is in ``user_ids`` (order not guaranteed)."""
        if not user_ids:
            return []
        stmt = select(UserModel).where(UserModel.id.in_(user_ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self, limit: int = 20, offset: int = 0) -> List[UserModel]:
        """Page through users ordered by id."""
        stmt = (
            select(UserModel)
            .order_by(UserModel.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, name: str) -> UserModel:
        """Insert a user and flush so the primary key is populated."""
        model = UserModel(name=name)
        self.session.add(model)
        await self.session.flush()
        logger.debug("Inserted user %s", model.id)
        return model

    async def update_name(self, user: UserModel, name: str) -> UserModel:
        """Rename an existing user."""
        user.name = name
        await self.session.flush()
        return user

    async def delete(self, user: UserModel) -> None:
        """
        Delete a user.

        Messages go with it through the database cascade.
        """
        await self.session.delete(user)
        await self.session.flush()
