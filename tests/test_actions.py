from datetime import datetime, timedelta

from src.db.models import utcnow
from src.services.actions import (
    ActionStatus,
    MessageAction,
    UserAction,
    handle_message_action,
    handle_user_action,
)


async def _create_user(session, name: str = "Alice") -> int:
    result = await handle_user_action(session, UserAction.create(name))
    assert result.status is ActionStatus.SUCCESS
    return result.affected_id


async def _create_message(session, user_id: int, content: str = "Hello", parent_id=None) -> int:
    result = await handle_message_action(
        session, MessageAction.create(user_id, content, parent_id=parent_id)
    )
    assert result.status is ActionStatus.SUCCESS
    return result.affected_id


async def test_create_then_get_user(session) -> None:
    user_id = await _create_user(session, "Igor")

    result = await handle_user_action(session, UserAction.get(user_id))

    assert result.status is ActionStatus.USER
    assert result.user.name == "Igor"
    assert result.affected_id == user_id


async def test_get_missing_user_is_not_found_failure(session) -> None:
    result = await handle_user_action(session, UserAction.get(999))

    assert result.status is ActionStatus.FAILURE
    assert result.error == "User not found"
    assert not result.ok


async def test_blank_name_is_rejected(session) -> None:
    result = await handle_user_action(session, UserAction.create("   "))

    assert result.status is ActionStatus.FAILURE
    assert result.error == "Name must not be empty"


async def test_update_user_changes_only_name(session) -> None:
    user_id = await _create_user(session, "Bob")

    result = await handle_user_action(session, UserAction.update(user_id, "Carl"))
    fetched = await handle_user_action(session, UserAction.get(user_id))

    assert result.status is ActionStatus.SUCCESS
    assert fetched.user.id == user_id
    assert fetched.user.name == "Carl"


async def test_update_missing_user_is_not_found_failure(session) -> None:
    result = await handle_user_action(session, UserAction.update(999, "Nobody"))

    assert result.error == "User not found"


async def test_delete_user_then_get_fails(session) -> None:
    user_id = await _create_user(session, "Dave")

    deleted = await handle_user_action(session, UserAction.delete(user_id))
    again = await handle_user_action(session, UserAction.delete(user_id))
    fetched = await handle_user_action(session, UserAction.get(user_id))

    assert deleted.status is ActionStatus.SUCCESS
    assert again.error == "User not found"
    assert fetched.error == "User not found"


async def test_list_users(session) -> None:
    for name in ("a", "b", "c"):
        await _create_user(session, name)

    result = await handle_user_action(session, UserAction.list(limit=2))

    assert result.status is ActionStatus.USERS
    assert [user.name for user in result.users] == ["a", "b"]


async def test_create_message_for_missing_user_fails(session) -> None:
    result = await handle_message_action(session, MessageAction.create(999, "orphan"))

    assert result.error == "User not found"


async def test_reply_to_missing_parent_fails(session) -> None:
    user_id = await _create_user(session)

    result = await handle_message_action(
        session, MessageAction.create(user_id, "reply", parent_id=999)
    )

    assert result.error == "Parent message not found"


async def test_create_then_get_message_round_trip(session) -> None:
    user_id = await _create_user(session, "Alex")
    root_id = await _create_message(session, user_id, "Hello, world!")
    reply_id = await _create_message(session, user_id, "Hi back", parent_id=root_id)

    result = await handle_message_action(session, MessageAction.get(reply_id))

    assert result.status is ActionStatus.MESSAGE
    assert result.message.user_id == user_id
    assert result.message.content == "Hi back"
    assert result.message.parent_id == root_id


async def test_update_message_changes_content_and_bumps_updated_at(session) -> None:
    user_id = await _create_user(session)
    message_id = await _create_message(session, user_id, "Hello, world!")
    before = (await handle_message_action(session, MessageAction.get(message_id))).message
    created_at, updated_at = before.created_at, before.updated_at

    result = await handle_message_action(session, MessageAction.update(message_id, "Goodbye, world!"))
    after = (await handle_message_action(session, MessageAction.get(message_id))).message

    assert result.status is ActionStatus.SUCCESS
    assert after.content == "Goodbye, world!"
    assert after.created_at == created_at
    assert after.updated_at >= updated_at
    assert after.user_id == user_id


async def test_missing_message_operations_fail(session) -> None:
    for action in (
        MessageAction.get(999),
        MessageAction.update(999, "x"),
        MessageAction.delete(999),
    ):
        result = await handle_message_action(session, action)
        assert result.error == "Message not found"


async def test_delete_message_then_get_fails(session) -> None:
    user_id = await _create_user(session, "Charlie")
    message_id = await _create_message(session, user_id)

    deleted = await handle_message_action(session, MessageAction.delete(message_id))
    fetched = await handle_message_action(session, MessageAction.get(message_id))

    assert deleted.status is ActionStatus.SUCCESS
    assert fetched.error == "Message not found"


async def test_list_for_user_without_messages_is_empty(session) -> None:
    result = await handle_message_action(session, MessageAction.for_user(12345))

    assert result.status is ActionStatus.MESSAGES
    assert result.messages == []


async def test_time_range_returns_recent_messages(session) -> None:
    user_id = await _create_user(session, "David")
    for _ in range(10):
        await _create_message(session, user_id, "Hello, world!")

    now = utcnow()
    result = await handle_message_action(
        session,
        MessageAction.in_time_range(user_id, now - timedelta(days=1), now + timedelta(minutes=1)),
    )

    assert result.status is ActionStatus.MESSAGES
    assert len(result.messages) == 10


async def test_inverted_time_range_fails(session) -> None:
    user_id = await _create_user(session)

    result = await handle_message_action(
        session,
        MessageAction.in_time_range(user_id, datetime(2024, 2, 1), datetime(2024, 1, 1)),
    )

    assert result.error == "Invalid time range: start is after end"
