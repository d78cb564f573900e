"""
GraphQL Schema
==============
Strawberry GraphQL schema for users and threaded messages.

Root fields map one-to-one onto the dispatch layer in
``src.services.actions``; nested fields go through the per-request
DataLoaders built in ``api.graphql.resolvers``.

Responsibility: GraphQL type definitions and resolvers.
"""

from datetime import datetime
from typing import List, Optional

import strawberry  # type: ignore[import]
from graphql import GraphQLError
from strawberry.types import Info  # type: ignore[import]

from src.db.models import MessageModel, UserModel
from src.services.actions import (
    ActionResult,
    ActionStatus,
    MessageAction,
    UserAction,
    handle_message_action,
    handle_user_action,
)
from api.graphql.resolvers import as_utc, parse_datetime, parse_id


# --------------------------------------------------------------------------- #
# GraphQL Types
# --------------------------------------------------------------------------- #


@strawberry.type
class User:
    """User GraphQL type."""

    id: strawberry.ID
    name: str

    @strawberry.field
    async def messages(self, info: Info) -> List["Message"]:
        """Resolve every message written by this user, oldest first."""
        loader = info.context["loaders"]["messages_by_user"]
        messages = await loader.load(int(self.id))
        return [Message.from_model(message) for message in messages]

    @classmethod
    def from_model(cls, model: UserModel) -> "User":
        """Convert SQLAlchemy model to GraphQL type."""
        return cls(id=strawberry.ID(str(model.id)), name=model.name)


@strawberry.type
class Message:
    """Message GraphQL type. ``parentId`` is set on replies."""

    id: strawberry.ID
    user_id: strawberry.ID
    content: str
    created_at: datetime
    updated_at: datetime
    parent_id: Optional[strawberry.ID]

    @strawberry.field
    async def user(self, info: Info) -> Optional[User]:
        """Resolve the author of this message."""
        loader = info.context["loaders"]["user"]
        user = await loader.load(int(self.user_id))
        return User.from_model(user) if user else None

    @strawberry.field
    async def parent(self, info: Info) -> Optional["Message"]:
        """Resolve the message this one replies to, if any."""
        if self.parent_id is None:
            return None

        loader = info.context["loaders"]["message"]
        parent = await loader.load(int(self.parent_id))
        return Message.from_model(parent) if parent else None

    @strawberry.field
    async def replies(self, info: Info) -> List["Message"]:
        """Resolve direct replies to this message."""
        loader = info.context["loaders"]["replies"]
        replies = await loader.load(int(self.id))
        return [Message.from_model(reply) for reply in replies]

    @classmethod
    def from_model(cls, model: MessageModel) -> "Message":
        return cls(
            id=strawberry.ID(str(model.id)),
            user_id=strawberry.ID(str(model.user_id)),
            content=model.content,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            parent_id=strawberry.ID(str(model.parent_id)) if model.parent_id is not None else None,
        )


@strawberry.type
class MutationResponse:
    """Outcome of a mutation. ``id`` is the record the mutation touched."""

    success: bool
    message: str
    id: Optional[strawberry.ID] = None


SUCCESS_MESSAGE = "Action succeeded"


def to_mutation_response(result: ActionResult) -> MutationResponse:
    """Turn a dispatch result into a response, raising on failure."""
    if not result.ok:
        raise GraphQLError(result.error)

    return MutationResponse(
        success=True,
        message=SUCCESS_MESSAGE,
        id=strawberry.ID(str(result.affected_id)) if result.affected_id is not None else None,
    )


async def _run_user_action(info: Info, action: UserAction) -> ActionResult:
    async with info.context["lock"]:
        return await handle_user_action(info.context["db"], action)


async def _run_message_action(info: Info, action: MessageAction) -> ActionResult:
    async with info.context["lock"]:
        return await handle_message_action(info.context["db"], action)


# --------------------------------------------------------------------------- #
# Query Root
# --------------------------------------------------------------------------- #


@strawberry.type
class Query:
    """GraphQL Query root."""

    @strawberry.field
    async def get_user(self, info: Info, id: strawberry.ID) -> User:
        """Fetch a single user; errors with "User not found" when absent."""
        result = await _run_user_action(info, UserAction.get(parse_id(id)))
        if result.status is not ActionStatus.USER:
            raise GraphQLError(result.error or "Unexpected database action")
        return User.from_model(result.user)

    @strawberry.field
    async def get_message(self, info: Info, id: strawberry.ID) -> Optional[Message]:
        """Fetch a single message; errors with "Message not found" when absent."""
        result = await _run_message_action(info, MessageAction.get(parse_id(id)))
        if result.status is ActionStatus.FAILURE:
            raise GraphQLError(result.error)
        if result.status is not ActionStatus.MESSAGE:
            return None
        return Message.from_model(result.message)

    @strawberry.field
    async def get_all_messages_for_user(
        self,
        info: Info,
        user_id: strawberry.ID,
    ) -> List[Message]:
        """Every message written by a user, oldest first."""
        result = await _run_message_action(info, MessageAction.for_user(parse_id(user_id)))
        if result.status is not ActionStatus.MESSAGES:
            raise GraphQLError("Failed to fetch messages")
        return [Message.from_model(message) for message in result.messages]

    @strawberry.field
    async def get_messages_in_time_range_for_user(
        self,
        info: Info,
        user_id: strawberry.ID,
        start: str,
        end: str,
    ) -> List[Message]:
        """A user's messages created between ``start`` and ``end`` inclusive."""
        action = MessageAction.in_time_range(
            parse_id(user_id),
            parse_datetime(start, "start"),
            parse_datetime(end, "end"),
        )
        result = await _run_message_action(info, action)
        if result.status is ActionStatus.FAILURE:
            raise GraphQLError(result.error)
        if result.status is not ActionStatus.MESSAGES:
            raise GraphQLError("Failed to fetch messages")
        return [Message.from_model(message) for message in result.messages]

    @strawberry.field
    async def users(self, info: Info, limit: int = 20, offset: int = 0) -> List[User]:
        """Page through users ordered by id."""
        if limit < 1 or offset < 0:
            raise GraphQLError("limit must be positive and offset must not be negative")
        result = await _run_user_action(info, UserAction.list(limit=limit, offset=offset))
        return [User.from_model(user) for user in result.users]


# --------------------------------------------------------------------------- #
# Mutation Root
# --------------------------------------------------------------------------- #


@strawberry.type
class Mutation:
    """GraphQL Mutation root."""

    @strawberry.mutation
    async def create_user(self, info: Info, name: str) -> MutationResponse:
        result = await _run_user_action(info, UserAction.create(name))
        return to_mutation_response(result)

    @strawberry.mutation
    async def update_user(self, info: Info, id: strawberry.ID, name: str) -> MutationResponse:
        result = await _run_user_action(info, UserAction.update(parse_id(id), name))
        return to_mutation_response(result)

    @strawberry.mutation
    async def delete_user(self, info: Info, id: strawberry.ID) -> MutationResponse:
        """Delete a user together with all of their messages."""
        result = await _run_user_action(info, UserAction.delete(parse_id(id)))
        return to_mutation_response(result)

    @strawberry.mutation
    async def create_message(
        self,
        info: Info,
        user_id: strawberry.ID,
        content: str,
        parent_id: Optional[strawberry.ID] = None,
    ) -> MutationResponse:
        """Post a message, or a reply when ``parentId`` is given."""
        action = MessageAction.create(
            parse_id(user_id),
            content,
            parent_id=parse_id(parent_id) if parent_id is not None else None,
        )
        result = await _run_message_action(info, action)
        return to_mutation_response(result)

    @strawberry.mutation
    async def update_message(
        self,
        info: Info,
        id: strawberry.ID,
        content: str,
    ) -> MutationResponse:
        result = await _run_message_action(info, MessageAction.update(parse_id(id), content))
        return to_mutation_response(result)

    @strawberry.mutation
    async def delete_message(self, info: Info, id: strawberry.ID) -> MutationResponse:
        """Delete a message together with its replies."""
        result = await _run_message_action(info, MessageAction.delete(parse_id(id)))
        return to_mutation_response(result)


# --------------------------------------------------------------------------- #
# Schema
# --------------------------------------------------------------------------- #


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
)
