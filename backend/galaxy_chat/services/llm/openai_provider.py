"""OpenAI chat completions provider."""

from typing import Any, AsyncIterator

from openai import AsyncOpenAI

from galaxy_chat.core.config import settings
from galaxy_chat.services.llm.base import TEMPERATURE, BaseLLMProvider, PromptMessage
from galaxy_chat.services.model_registry import ModelConfig


class OpenAIProvider(BaseLLMProvider):
    def __init__(self, api_key: str | None = None):
        self.client = AsyncOpenAI(api_key=api_key or settings.openai_api_key)

    @staticmethod
    def _to_openai(message: PromptMessage) -> dict[str, Any]:
        if not message.images:
            return {"role": message.role, "content": message.content}
        content: list[dict[str, Any]] = [{"type": "text", "text": message.content}]
        for image in message.images:
            content.append({"type": "image_url", "image_url": {"url": image.as_data_url()}})
        return {"role": message.role, "content": content}

    async def chat_stream(
        self, messages: list[PromptMessage], model: ModelConfig, system_prompt: str = ""
    ) -> AsyncIterator[str]:
        payload = [self._to_openai(m) for m in messages]
        if system_prompt:
            payload.insert(0, {"role": "system", "content": system_prompt})

        stream = await self.client.chat.completions.create(
            model=model.model_id,
            messages=payload,
            temperature=TEMPERATURE,
            max_tokens=model.max_tokens,
            stream=True,
        )
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content
