"""Types exchanged between the context assembler and the chat store."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Optional

from galaxy_chat.models.message import Message


@dataclass
class ChatSnapshot:
    """Read-only view of a stored chat: messages in stored (append) order."""

    id: str
    title: str
    updated_at: datetime
    messages: list[Message] = field(default_factory=list)
    is_archived: bool = False


@dataclass
class ContextCandidate:
    """A message from another chat, tagged with where it came from."""

    message: Message
    chat_id: str
    chat_title: str
    chat_updated_at: datetime


# find_recent_chats(user_id, exclude_chat_id=None, limit=10) -> chats by updated_at desc,
# non-archived only
FindRecentChats = Callable[..., Awaitable[list[ChatSnapshot]]]
