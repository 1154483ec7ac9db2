"""REST API for a user's chat history."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from galaxy_chat.api.deps import get_chat_store
from galaxy_chat.core.auth import require_user_id
from galaxy_chat.models.message import IncomingMessage
from galaxy_chat.services.chat_store import ChatStore

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateChat(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    messages: Optional[list[IncomingMessage]] = None
    model_id: Optional[str] = Field(default=None, alias="modelId")


class UpdateChat(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    messages: Optional[list[IncomingMessage]] = None
    add_message: Optional[IncomingMessage] = Field(default=None, alias="addMessage")
    model_id: Optional[str] = Field(default=None, alias="modelId")
    is_archived: Optional[bool] = Field(default=None, alias="isArchived")


@router.get("/")
async def list_chats(user_id: str = Depends(require_user_id), store: ChatStore = Depends(get_chat_store)):
    chats = store.list_chats(user_id)
    return [
        {**c.to_dict(include_messages=False), "message_count": len(c.messages)}
        for c in chats
    ]


@router.post("/")
async def create_chat(
    body: CreateChat,
    user_id: str = Depends(require_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    if not body.title or body.messages is None or not body.model_id:
        raise HTTPException(status_code=400, detail="Title, messages, and model_id are required")

    chat = store.create_chat(
        user_id,
        body.title,
        [m.to_message() for m in body.messages],
        body.model_id,
    )
    return chat.to_dict()


@router.get("/{chat_id}")
async def get_chat(chat_id: str, user_id: str = Depends(require_user_id), store: ChatStore = Depends(get_chat_store)):
    chat = store.get_chat(user_id, chat_id)
    if not chat:
        logger.debug(f"Chat {chat_id} not found for user {user_id}")
        raise HTTPException(status_code=404, detail="Chat not found")

    with_attachments = sum(1 for m in chat.messages if m.attachments)
    logger.debug(f"Loading chat {chat_id}: {len(chat.messages)} messages, {with_attachments} with attachments")
    return chat.to_dict()


@router.patch("/{chat_id}")
async def update_chat(
    chat_id: str,
    body: UpdateChat,
    user_id: str = Depends(require_user_id),
    store: ChatStore = Depends(get_chat_store),
):
    if body.add_message is not None:
        # Appending is exclusive: other fields in the same request are ignored
        chat = store.append_message(chat_id, body.add_message.to_message(), user_id=user_id)
    else:
        chat = store.update_chat(
            user_id,
            chat_id,
            title=body.title,
            messages=[m.to_message() for m in body.messages] if body.messages is not None else None,
            model_id=body.model_id,
            is_archived=body.is_archived,
        )

    if not chat:
        raise HTTPException(status_code=404, detail="Chat not found")
    return chat.to_dict()


@router.delete("/{chat_id}")
async def delete_chat(chat_id: str, user_id: str = Depends(require_user_id), store: ChatStore = Depends(get_chat_store)):
    if not store.delete_chat(user_id, chat_id):
        raise HTTPException(status_code=404, detail="Chat not found")
    return {"message": "Chat deleted successfully", "deleted_chat_id": chat_id}
