"""Anthropic Claude provider."""

from typing import Any, AsyncIterator

import anthropic

from galaxy_chat.core.config import settings
from galaxy_chat.services.llm.base import TEMPERATURE, BaseLLMProvider, PromptMessage
from galaxy_chat.services.model_registry import ModelConfig


class AnthropicProvider(BaseLLMProvider):
    def __init__(self, api_key: str | None = None):
        self.client = anthropic.AsyncAnthropic(api_key=api_key or settings.anthropic_api_key)

    @staticmethod
    def _to_anthropic(message: PromptMessage) -> dict[str, Any]:
        if not message.images:
            return {"role": message.role, "content": message.content}
        content: list[dict[str, Any]] = [
            {
                "type": "image",
                "source": {"type": "base64", "media_type": image.mime_type, "data": image.as_base64()},
            }
            for image in message.images
        ]
        content.append({"type": "text", "text": message.content})
        return {"role": message.role, "content": content}

    async def chat_stream(
        self, messages: list[PromptMessage], model: ModelConfig, system_prompt: str = ""
    ) -> AsyncIterator[str]:
        # The Messages API has no system role; fold system turns into the system prompt
        system_parts = [system_prompt] if system_prompt else []
        system_parts += [m.content for m in messages if m.role == "system"]
        turns = [self._to_anthropic(m) for m in messages if m.role != "system"]

        kwargs: dict[str, Any] = {
            "model": model.model_id,
            "max_tokens": model.max_tokens,
            "temperature": TEMPERATURE,
            "messages": turns,
        }
        if system_parts:
            kwargs["system"] = "\n\n".join(system_parts)

        async with self.client.messages.stream(**kwargs) as stream:
            async for text in stream.text_stream:
                yield text
