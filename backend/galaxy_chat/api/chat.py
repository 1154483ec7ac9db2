"""Chat completions: one POST per turn, streamed back as plain text."""

import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from galaxy_chat.api.deps import get_chat_store, get_model_registry, get_storage
from galaxy_chat.core.auth import get_current_user_id
from galaxy_chat.core.config import settings
from galaxy_chat.core.database import engine
from galaxy_chat.models.message import ClientAttachment, IncomingMessage, Message
from galaxy_chat.services.attachments import build_prompt_messages, reconcile_attachments
from galaxy_chat.services.chat_store import ChatStore, make_title
from galaxy_chat.services.context import ContextAssembler
from galaxy_chat.services.llm import BaseLLMProvider, PromptMessage, build_system_prompt, get_llm_provider
from galaxy_chat.services.model_registry import ModelEntry, ModelRegistry, estimate_tokens, fits_context_window
from galaxy_chat.services.storage import BaseStorage

router = APIRouter()
logger = logging.getLogger(__name__)

ERROR_MARKER = "\n[Error: the model failed to respond]"


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[IncomingMessage]
    model_id: Optional[str] = Field(default=None, alias="modelId")
    chat_id: Optional[str] = Field(default=None, alias="chatId")
    save_to_chat: bool = Field(default=False, alias="saveToChat")
    experimental_attachments: Optional[list[ClientAttachment]] = None


@router.get("/")
async def list_models(registry: ModelRegistry = Depends(get_model_registry)):
    return [entry.to_public() for entry in registry.all_models()]


@router.post("/")
async def chat(
    body: ChatRequest,
    user_id: Optional[str] = Depends(get_current_user_id),
    store: ChatStore = Depends(get_chat_store),
    registry: ModelRegistry = Depends(get_model_registry),
    storage: BaseStorage = Depends(get_storage),
):
    logger.info(
        f"Chat request: {len(body.messages)} messages, "
        f"{len(body.experimental_attachments or [])} attachments, "
        f"model={body.model_id}, chat={body.chat_id}"
    )
    if not body.messages:
        raise HTTPException(status_code=400, detail="Messages are required")

    entry = registry.resolve(body.model_id)
    if not entry:
        raise HTTPException(status_code=400, detail="Model not found")
    try:
        provider = get_llm_provider(entry.config.provider)
    except ValueError:
        raise HTTPException(status_code=400, detail="Unsupported provider")

    messages = reconcile_attachments(body.messages, body.experimental_attachments)

    chat_id = body.chat_id
    persist = bool(user_id and body.save_to_chat)
    if persist:
        chat_id = _persist_turn(store, user_id, chat_id, messages, entry.key)

    assembler = ContextAssembler(store.find_recent_chats, recent_chat_limit=settings.context_recent_chat_limit)
    context = await assembler.assemble(
        messages,
        user_id=user_id,
        current_chat_id=chat_id,
        max_messages=settings.context_max_messages,
    )
    prompt = await build_prompt_messages(context, entry.config, storage, settings.pdf_max_pages)

    estimated = sum(estimate_tokens(m.content) for m in prompt)
    if not fits_context_window(entry.config, estimated):
        logger.warning(f"Context of ~{estimated} tokens may exceed {entry.key} window of {entry.config.context_window}")

    headers = {"x-chat-id": chat_id} if chat_id else {}
    return StreamingResponse(
        _stream_reply(provider, prompt, entry, chat_id if persist else None),
        media_type="text/plain; charset=utf-8",
        headers=headers,
    )


async def _stream_reply(
    provider: BaseLLMProvider,
    prompt: list[PromptMessage],
    entry: ModelEntry,
    save_to_chat_id: Optional[str],
) -> AsyncIterator[str]:
    reply = ""
    try:
        async for token in provider.chat_stream(prompt, entry.config, build_system_prompt()):
            reply += token
            yield token
    except Exception:
        logger.exception(f"Completion failed for model {entry.key}")
        yield ERROR_MARKER
        return

    if save_to_chat_id and reply:
        try:
            _save_reply(save_to_chat_id, reply, entry.key)
        except Exception:
            logger.exception(f"Failed to save assistant reply to chat {save_to_chat_id}")


def _persist_turn(
    store: ChatStore, user_id: str, chat_id: Optional[str], messages: list[Message], model_key: str
) -> Optional[str]:
    """Create the chat on the first turn, otherwise append only the newest message.

    Clients resend the whole conversation on every turn. Failures are logged and
    the turn continues unsaved.
    """
    try:
        if not chat_id:
            chat = store.create_chat(user_id, make_title(messages), messages, model_key)
            return chat.id

        if not store.append_message(chat_id, messages[-1], model_id=model_key, user_id=user_id):
            logger.warning(f"Chat {chat_id} not found for user {user_id}; message not saved")
        return chat_id
    except Exception:
        logger.exception("Failed to save chat")
        store.session.rollback()
        return chat_id


def _save_reply(chat_id: str, content: str, model_key: str) -> None:
    # The request session is gone once streaming starts
    with Session(engine) as session:
        ChatStore(session).append_message(
            chat_id, Message(role="assistant", content=content), model_id=model_key
        )
