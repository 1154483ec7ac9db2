"""Chat persistence on top of SQLModel.

One ChatStore wraps one request-scoped session. `find_recent_chats` is the
read-only capability handed to the context assembler.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Session, select

from galaxy_chat.models.chat import Chat, ChatMessage, User
from galaxy_chat.models.message import Message, ensure_utc
from galaxy_chat.services.context.types import ChatSnapshot

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50
DEFAULT_TITLE = "New Chat"


def make_title(messages: list[Message]) -> str:
    """Title a chat after its first user message."""
    first_user = next((m for m in messages if m.role == "user"), None)
    if first_user is None:
        return DEFAULT_TITLE
    title = first_user.content[:TITLE_MAX_LENGTH].replace("\n", " ").strip()
    if len(title) > TITLE_MAX_LENGTH:
        title = title[: TITLE_MAX_LENGTH - 3] + "..."
    return title or DEFAULT_TITLE


class ChatStore:
    def __init__(self, session: Session):
        self.session = session

    # --- Context assembly ---

    async def find_recent_chats(
        self, user_id: str, exclude_chat_id: Optional[str] = None, limit: int = 10
    ) -> list[ChatSnapshot]:
        """Most recently updated, non-archived chats of a user."""
        query = select(Chat).where(Chat.user_id == user_id, Chat.is_archived == False)  # noqa: E712
        if exclude_chat_id:
            query = query.where(Chat.id != exclude_chat_id)
        chats = self.session.exec(
            query.order_by(Chat.updated_at.desc()).limit(limit)  # type: ignore
        ).all()
        return [
            ChatSnapshot(
                id=c.id,
                title=c.title,
                updated_at=ensure_utc(c.updated_at),
                messages=[m.to_message() for m in c.messages],
                is_archived=c.is_archived,
            )
            for c in chats
        ]

    # --- CRUD ---

    def list_chats(self, user_id: str) -> list[Chat]:
        return list(self.session.exec(
            select(Chat).where(Chat.user_id == user_id).order_by(Chat.updated_at.desc())  # type: ignore
        ).all())

    def get_chat(self, user_id: str, chat_id: str) -> Optional[Chat]:
        chat = self.session.get(Chat, chat_id)
        if not chat or chat.user_id != user_id:
            return None
        return chat

    def create_chat(self, user_id: str, title: str, messages: list[Message], model_id: str) -> Chat:
        chat = Chat(user_id=user_id, title=title, model_id=model_id)
        chat.messages = [ChatMessage.from_message(m, i) for i, m in enumerate(messages)]
        self.session.add(chat)
        self.session.commit()
        self.session.refresh(chat)
        logger.info(f"Created chat {chat.id} for user {user_id} ({len(messages)} messages)")
        self._record_usage(user_id, chats=1, messages=len(messages))
        return chat

    def append_message(
        self,
        chat_id: str,
        message: Message,
        model_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Optional[Chat]:
        chat = self.session.get(Chat, chat_id)
        if not chat or (user_id is not None and chat.user_id != user_id):
            logger.debug(f"Append: chat {chat_id} not found")
            return None

        chat.messages.append(ChatMessage.from_message(message, len(chat.messages)))
        chat.updated_at = datetime.now(timezone.utc)
        if model_id:
            chat.model_id = model_id
        self.session.add(chat)
        self.session.commit()
        self.session.refresh(chat)
        logger.debug(f"Appended message {message.id} ({message.role}) to chat {chat_id}")
        self._record_usage(chat.user_id, messages=1)
        return chat

    def update_chat(
        self,
        user_id: str,
        chat_id: str,
        *,
        title: Optional[str] = None,
        messages: Optional[list[Message]] = None,
        model_id: Optional[str] = None,
        is_archived: Optional[bool] = None,
    ) -> Optional[Chat]:
        chat = self.get_chat(user_id, chat_id)
        if not chat:
            return None

        if title is not None:
            chat.title = title
        if messages is not None:
            chat.messages = [ChatMessage.from_message(m, i) for i, m in enumerate(messages)]
        if model_id is not None:
            chat.model_id = model_id
        if is_archived is not None:
            chat.is_archived = is_archived
        chat.updated_at = datetime.now(timezone.utc)

        self.session.add(chat)
        self.session.commit()
        self.session.refresh(chat)
        return chat

    def delete_chat(self, user_id: str, chat_id: str) -> bool:
        chat = self.get_chat(user_id, chat_id)
        if not chat:
            logger.debug(f"Delete: chat {chat_id} not found")
            return False

        self.session.delete(chat)
        self.session.commit()
        logger.debug(f"Deleted chat {chat_id}")

        # A failed counter update must not fail the deletion
        try:
            self._record_usage(user_id, chats=-1)
        except Exception:
            logger.exception(f"Failed to update chat count for user {user_id}")
            self.session.rollback()
        return True

    # --- Users ---

    def get_user(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def _record_usage(self, user_id: str, chats: int = 0, messages: int = 0) -> None:
        user = self.session.get(User, user_id) or User(id=user_id)
        now = datetime.now(timezone.utc)
        user.total_chats = max(0, user.total_chats + chats)
        user.total_messages += messages
        user.updated_at = now
        user.last_active_at = now
        self.session.add(user)
        self.session.commit()
