"""Message shapes shared by the API, the chat store and context assembly."""

import time
from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

Role = Literal["user", "assistant", "system"]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def new_message_id() -> str:
    return f"msg_{int(time.time() * 1000)}_{uuid4().hex[:8]}"


def ensure_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Attachment(BaseModel):
    url: str
    name: str
    type: str = ""  # MIME type, e.g. "image/png" or "application/pdf"
    size: Optional[int] = None

    @property
    def is_image(self) -> bool:
        return self.type.startswith("image/")

    @property
    def is_pdf(self) -> bool:
        return self.type == "application/pdf"


class ClientAttachment(BaseModel):
    """Attachment as declared by the chat client for the newest user turn."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    name: str
    content_type: str = Field(default="", alias="contentType")

    def to_attachment(self) -> Attachment:
        return Attachment(url=self.url, name=self.name, type=self.content_type)


class Message(BaseModel):
    id: str = Field(default_factory=new_message_id)
    role: Role
    content: str = ""
    timestamp: Optional[datetime] = None
    attachments: list[Attachment] = Field(default_factory=list)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value):
        # Unparseable timestamps become None and sort as the oldest messages
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            # Epoch milliseconds, as sent by browser clients
            try:
                return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                return None
        return None

    @property
    def sort_time(self) -> datetime:
        """Ordering key for context assembly; missing timestamps sort first."""
        if self.timestamp is None:
            return EPOCH
        return ensure_utc(self.timestamp)


class IncomingMessage(Message):
    """Message as sent by chat clients, which may use either attachments field."""

    experimental_attachments: Optional[list[Attachment]] = None

    def to_message(self) -> Message:
        return Message(
            id=self.id,
            role=self.role,
            content=self.content,
            timestamp=self.timestamp,
            attachments=list(self.attachments or self.experimental_attachments or []),
        )
