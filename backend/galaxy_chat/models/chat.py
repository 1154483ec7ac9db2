"""Chat, message and user tables for chat history persistence."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel

from galaxy_chat.models.message import Attachment, Message, ensure_utc


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Chat(SQLModel, table=True):
    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    user_id: str = Field(index=True)
    title: str = Field(default="New Chat")
    model_id: str
    is_archived: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now, index=True)

    messages: list["ChatMessage"] = Relationship(
        back_populates="chat",
        sa_relationship_kwargs={
            "order_by": "ChatMessage.position",
            "cascade": "all, delete-orphan",
        },
    )

    def to_dict(self, include_messages: bool = True) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "model_id": self.model_id,
            "is_archived": self.is_archived,
            "created_at": ensure_utc(self.created_at).isoformat(),
            "updated_at": ensure_utc(self.updated_at).isoformat(),
        }
        if include_messages:
            data["messages"] = [m.to_message().model_dump(mode="json") for m in self.messages]
        return data


class ChatMessage(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    chat_id: str = Field(foreign_key="chat.id", index=True)
    message_id: str
    position: int  # append order within the chat
    role: str  # "user" | "assistant" | "system"
    content: str
    timestamp: datetime = Field(default_factory=_now)
    attachments: list[dict] = Field(default_factory=list, sa_column=Column(JSON))

    chat: Optional[Chat] = Relationship(back_populates="messages")

    @classmethod
    def from_message(cls, message: Message, position: int) -> "ChatMessage":
        return cls(
            message_id=message.id,
            position=position,
            role=message.role,
            content=message.content,
            timestamp=message.timestamp or _now(),
            attachments=[a.model_dump() for a in message.attachments],
        )

    def to_message(self) -> Message:
        return Message(
            id=self.message_id,
            role=self.role,
            content=self.content,
            timestamp=ensure_utc(self.timestamp),
            attachments=[Attachment(**a) for a in self.attachments or []],
        )


class User(SQLModel, table=True):
    id: str = Field(primary_key=True)  # user id issued by the identity provider
    total_chats: int = Field(default=0)
    total_messages: int = Field(default=0)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    last_active_at: datetime = Field(default_factory=_now)
