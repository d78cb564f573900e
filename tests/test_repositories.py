from datetime import datetime

import pytest

from src.db.repositories import MessageRepository, UserRepository


async def test_create_then_get_user_returns_same_fields(session) -> None:
    users = UserRepository(session)

    created = await users.create("Alice")
    fetched = await users.get_by_id(created.id)

    assert fetched is not None
    assert fetched.id == created.id
    assert fetched.name == "Alice"


async def test_get_missing_user_returns_none(session) -> None:
    assert await UserRepository(session).get_by_id(404) is None


async def test_list_all_pages_by_id(session) -> None:
    users = UserRepository(session)
    for name in ("a", "b", "c"):
        await users.create(name)

    page = await users.list_all(limit=2, offset=1)

    assert [user.name for user in page] == ["b", "c"]


async def test_message_create_sets_both_timestamps(session) -> None:
    user = await UserRepository(session).create("Bob")

    message = await MessageRepository(session).create(user.id, "Hello, world!")

    assert message.id is not None
    assert message.parent_id is None
    assert message.created_at == message.updated_at


async def test_list_by_user_only_returns_that_users_messages(session) -> None:
    users = UserRepository(session)
    messages = MessageRepository(session)
    alice = await users.create("Alice")
    bob = await users.create("Bob")
    await messages.create(alice.id, "first")
    await messages.create(bob.id, "not mine")
    await messages.create(alice.id, "second")

    listed = await messages.list_by_user(alice.id)

    assert [m.content for m in listed] == ["first", "second"]


async def test_time_range_bounds_are_inclusive(session) -> None:
    user = await UserRepository(session).create("Carol")
    messages = MessageRepository(session)
    stamps = [
        datetime(2024, 1, 1, 9, 0),
        datetime(2024, 1, 1, 12, 0),
        datetime(2024, 1, 1, 15, 0),
        datetime(2024, 1, 2, 9, 0),
    ]
    for index, stamp in enumerate(stamps):
        message = await messages.create(user.id, f"m{index}")
        message.created_at = stamp
    await session.flush()

    found = await messages.list_by_user_in_range(
        user.id,
        datetime(2024, 1, 1, 12, 0),
        datetime(2024, 1, 1, 15, 0),
    )

    assert [m.content for m in found] == ["m1", "m2"]


async def test_deleting_user_cascades_to_messages(database) -> None:
    async with database.session() as session:
        user = await UserRepository(session).create("Dave")
        messages = MessageRepository(session)
        await messages.create(user.id, "one")
        await messages.create(user.id, "two")
        user_id = user.id

    async with database.session() as session:
        users = UserRepository(session)
        await users.delete(await users.get_by_id(user_id))

    async with database.session() as session:
        assert await MessageRepository(session).list_by_user(user_id) == []


async def test_deleting_parent_removes_whole_reply_thread(database) -> None:
    async with database.session() as session:
        user = await UserRepository(session).create("Erin")
        messages = MessageRepository(session)
        root = await messages.create(user.id, "root")
        reply = await messages.create(user.id, "reply", parent_id=root.id)
        nested = await messages.create(user.id, "nested", parent_id=reply.id)
        sibling = await messages.create(user.id, "unrelated")
        ids = (root.id, reply.id, nested.id, sibling.id)

    async with database.session() as session:
        messages = MessageRepository(session)
        await messages.delete(await messages.get_by_id(ids[0]))

    async with database.session() as session:
        remaining = await MessageRepository(session).list_by_user(user.id)
        assert [m.id for m in remaining] == [ids[3]]


async def test_list_replies_groups_children_of_several_parents(session) -> None:
    user = await UserRepository(session).create("Finn")
    messages = MessageRepository(session)
    first = await messages.create(user.id, "first")
    second = await messages.create(user.id, "second")
    await messages.create(user.id, "re: first", parent_id=first.id)
    await messages.create(user.id, "re: second", parent_id=second.id)

    replies = await messages.list_replies([first.id, second.id])

    assert sorted((r.parent_id, r.content) for r in replies) == [
        (first.id, "re: first"),
        (second.id, "re: second"),
    ]


async def test_session_rolls_back_on_error_and_close_is_idempotent(database) -> None:
    with pytest.raises(RuntimeError):
        async with database.session() as session:
            await UserRepository(session).create("Ghost")
            raise RuntimeError("boom")

    async with database.session() as session:
        assert await UserRepository(session).list_all() == []

    await database.close()
    await database.close()
    assert not database.initialized
