"""Google Gemini LLM provider."""

from typing import AsyncIterator

from google import genai
from google.genai import types

from galaxy_chat.core.config import settings
from galaxy_chat.services.llm.base import TEMPERATURE, BaseLLMProvider, PromptMessage
from galaxy_chat.services.model_registry import ModelConfig


class GeminiProvider(BaseLLMProvider):
    def __init__(self, api_key: str | None = None):
        self.client = genai.Client(api_key=api_key or settings.gemini_api_key)

    @staticmethod
    def _to_content(message: PromptMessage) -> types.Content:
        parts = [types.Part(text=message.content)]
        for image in message.images:
            parts.append(types.Part.from_bytes(data=image.data, mime_type=image.mime_type))
        role = "model" if message.role == "assistant" else "user"
        return types.Content(role=role, parts=parts)

    async def chat_stream(
        self, messages: list[PromptMessage], model: ModelConfig, system_prompt: str = ""
    ) -> AsyncIterator[str]:
        # Gemini takes system text as configuration, not as a turn
        system_parts = [system_prompt] if system_prompt else []
        system_parts += [m.content for m in messages if m.role == "system"]
        config = types.GenerateContentConfig(
            system_instruction="\n\n".join(system_parts) or None,
            temperature=TEMPERATURE,
            max_output_tokens=model.max_tokens,
        )
        contents = [self._to_content(m) for m in messages if m.role != "system"]

        response = await self.client.aio.models.generate_content_stream(
            model=model.model_id,
            contents=contents,
            config=config,
        )
        async for chunk in response:
            if chunk.text:
                yield chunk.text
