"""Tests for chat persistence and the recent-chat lookup used for context."""

import asyncio
from datetime import timedelta

import pytest
from sqlmodel import Session

from galaxy_chat.models.message import Attachment, Message
from galaxy_chat.services.chat_store import ChatStore, make_title
from tests.conftest import BASE_TIME, USER_ID, seed_chat, test_engine


@pytest.fixture
def store():
    with Session(test_engine) as session:
        yield ChatStore(session)


def recent(store, **kwargs):
    return asyncio.run(store.find_recent_chats(USER_ID, **kwargs))


def test_create_chat_keeps_message_order(store):
    messages = [
        Message(id="m1", role="user", content="hi", timestamp=BASE_TIME),
        Message(id="m2", role="assistant", content="hello", timestamp=BASE_TIME),
    ]
    chat = store.create_chat(USER_ID, "Greeting", messages, "gpt-4o")
    assert [m.position for m in chat.messages] == [0, 1]
    assert [m.to_message().id for m in chat.messages] == ["m1", "m2"]


def test_append_message_bumps_updated_at(store):
    cid = seed_chat(messages=[("user", "one")], updated_at=BASE_TIME)
    chat = store.append_message(cid, Message(role="assistant", content="two"), model_id="claude-haiku")
    assert [m.content for m in chat.messages] == ["one", "two"]
    assert chat.messages[-1].position == 1
    assert chat.model_id == "claude-haiku"
    assert chat.updated_at.replace(tzinfo=None) > BASE_TIME.replace(tzinfo=None)


def test_append_message_checks_owner(store):
    cid = seed_chat(user_id="someone_else")
    assert store.append_message(cid, Message(role="user", content="x"), user_id=USER_ID) is None
    assert store.append_message("missing", Message(role="user", content="x")) is None


def test_attachments_survive_storage(store):
    attachment = Attachment(url="/uploads/cat.png", name="cat.png", type="image/png", size=10)
    chat = store.create_chat(USER_ID, "Pics", [Message(role="user", content="look", attachments=[attachment])], "gpt-4o")
    loaded = store.get_chat(USER_ID, chat.id).messages[0].to_message()
    assert loaded.attachments == [attachment]


def test_find_recent_chats_order_and_limit(store):
    for day in range(5):
        seed_chat(title=f"Day {day}", messages=[("user", "hi")], updated_at=BASE_TIME + timedelta(days=day))
    chats = recent(store, limit=3)
    assert [c.title for c in chats] == ["Day 4", "Day 3", "Day 2"]
    assert chats[0].updated_at.tzinfo is not None


def test_find_recent_chats_filters(store):
    current = seed_chat(title="Current", messages=[("user", "now")], updated_at=BASE_TIME + timedelta(days=2))
    seed_chat(title="Archived", messages=[("user", "old")], is_archived=True)
    seed_chat(user_id="someone_else", title="Foreign", messages=[("user", "theirs")])
    seed_chat(title="Kept", messages=[("user", "kept"), ("assistant", "yes")])

    chats = recent(store, exclude_chat_id=current)
    assert [c.title for c in chats] == ["Kept"]
    assert [m.content for m in chats[0].messages] == ["kept", "yes"]


def test_usage_counters(store):
    chat = store.create_chat(USER_ID, "Count", [Message(role="user", content="a")], "gpt-4o")
    store.append_message(chat.id, Message(role="assistant", content="b"))
    user = store.get_user(USER_ID)
    assert (user.total_chats, user.total_messages) == (1, 2)

    assert store.delete_chat(USER_ID, chat.id)
    assert store.get_user(USER_ID).total_chats == 0
    assert store.delete_chat(USER_ID, chat.id) is False


@pytest.mark.parametrize("messages, expected", [
    ([Message(role="user", content="Plan a trip\nto Lisbon")], "Plan a trip to Lisbon"),
    ([Message(role="assistant", content="Hi!"), Message(role="user", content="  spaced  ")], "spaced"),
    ([Message(role="user", content="x" * 80)], "x" * 50),
    ([Message(role="assistant", content="no user turn")], "New Chat"),
    ([Message(role="user", content="   ")], "New Chat"),
])
def test_make_title(messages, expected):
    assert make_title(messages) == expected
