"""
SQLAlchemy database models for Threadline.

ORM models that map to database tables with proper indexing,
constraints, and relationships.

Responsibility: Define database schema and ORM mappings
"""

from datetime import datetime, timezone
from typing import Optional, List
from sqlalchemy import (
    String, Integer, DateTime, Text,
    ForeignKey, Index
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


class UserModel(Base):
    """
    Database model for users.

    A user owns zero or more messages. Deleting a user removes its
    messages through the ``ON DELETE CASCADE`` foreign key on
    ``messages.user_id``.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Display name (not unique)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    messages: Mapped[List["MessageModel"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, name={self.name})>"


class MessageModel(Base):
    """
    Database model for messages.

    Messages form reply threads through the nullable ``parent_id``
    self-reference. Replies are deleted together with their parent.
    """

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("messages.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=True,
        index=True
    )

    # Timestamps (naive UTC)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow
    )

    user: Mapped[UserModel] = relationship(back_populates="messages")

    parent: Mapped[Optional["MessageModel"]] = relationship(
        back_populates="replies",
        remote_side=[id],
    )

    replies: Mapped[List["MessageModel"]] = relationship(
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # Indexes
    __table_args__ = (
        Index("idx_messages_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<MessageModel(id={self.id}, "
            f"user_id={self.user_id}, "
            f"parent_id={self.parent_id})>"
        )
