"""Attachment handling around a chat turn.

Two steps, both at the edges of context assembly:

1. reconcile_attachments: normalise incoming messages to one attachments
   field and attach the client-declared files to the newest user turn.
2. build_prompt_messages: turn the assembled context into provider messages.
   Images (and PDFs, expanded to page images) are loaded for the last message
   only, so attachments carried by older context messages are never
   re-expanded into the prompt.
"""

import logging
from pathlib import PurePath
from typing import Optional

import httpx

from galaxy_chat.core.sandbox import SandboxError, upload_path_from_url
from galaxy_chat.models.message import Attachment, ClientAttachment, IncomingMessage, Message
from galaxy_chat.services.llm.base import InlineImage, PromptMessage
from galaxy_chat.services.model_registry import ModelConfig
from galaxy_chat.services.storage.base import BaseStorage

logger = logging.getLogger(__name__)

_IMAGE_MIME_BY_EXTENSION = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def reconcile_attachments(
    messages: list[IncomingMessage], client_attachments: Optional[list[ClientAttachment]] = None
) -> list[Message]:
    reconciled = [m.to_message() for m in messages]
    if client_attachments and reconciled and reconciled[-1].role == "user":
        reconciled[-1] = reconciled[-1].model_copy(
            update={"attachments": [a.to_attachment() for a in client_attachments]}
        )
        logger.debug(f"Added {len(client_attachments)} attachments to last user message")
    return reconciled


async def _load_image(url: str, client: httpx.AsyncClient) -> Optional[InlineImage]:
    try:
        if url.startswith("/uploads/"):
            path = upload_path_from_url(url)
            mime_type = _IMAGE_MIME_BY_EXTENSION.get(PurePath(url).suffix.lower(), "image/jpeg")
            return InlineImage(mime_type=mime_type, data=path.read_bytes())
        if url.startswith("http"):
            resp = await client.get(url)
            resp.raise_for_status()
            mime_type = resp.headers.get("content-type", "image/jpeg").split(";")[0]
            return InlineImage(mime_type=mime_type, data=resp.content)
    except (SandboxError, OSError, httpx.HTTPError) as e:
        logger.warning(f"Error loading image {url}: {e}")
        return None
    logger.warning(f"Unsupported image URL: {url}")
    return None


async def _image_urls(attachments: list[Attachment], storage: BaseStorage, pdf_max_pages: int) -> list[str]:
    urls: list[str] = []
    for att in attachments:
        if att.is_image:
            urls.append(att.url)
        elif att.is_pdf:
            pages = await storage.pdf_page_urls(att.url, pdf_max_pages)
            if not pages:
                logger.info(f"PDF {att.name} could not be expanded to page images")
            urls.extend(pages)
    return urls


async def build_prompt_messages(
    context: list[Message],
    model: ModelConfig,
    storage: BaseStorage,
    pdf_max_pages: int = 10,
    http_client: Optional[httpx.AsyncClient] = None,
) -> list[PromptMessage]:
    prompt = [PromptMessage(role=m.role, content=m.content) for m in context]
    if not context or not model.image or not context[-1].attachments:
        return prompt

    urls = await _image_urls(context[-1].attachments, storage, pdf_max_pages)
    if not urls:
        return prompt

    client = http_client or httpx.AsyncClient(timeout=30.0)
    try:
        for url in urls:
            image = await _load_image(url, client)
            if image:
                prompt[-1].images.append(image)
    finally:
        if http_client is None:
            await client.aclose()

    logger.info(f"Last message carries {len(prompt[-1].images)} images for {model.model_id}")
    return prompt
