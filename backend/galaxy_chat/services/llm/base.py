"""Abstract LLM provider interface. All providers must implement this."""

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator

from galaxy_chat.services.model_registry import ModelConfig

TEMPERATURE = 0.7


@dataclass
class InlineImage:
    mime_type: str
    data: bytes

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def as_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.as_base64()}"


@dataclass
class PromptMessage:
    role: str  # "user" | "assistant" | "system"
    content: str
    images: list[InlineImage] = field(default_factory=list)


class BaseLLMProvider(ABC):
    @abstractmethod
    def chat_stream(
        self, messages: list[PromptMessage], model: ModelConfig, system_prompt: str = ""
    ) -> AsyncIterator[str]:
        """Stream a chat response token by token."""
        ...
