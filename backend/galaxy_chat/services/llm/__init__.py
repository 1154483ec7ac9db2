"""LLM provider factory."""

from datetime import date

from galaxy_chat.services.llm.base import BaseLLMProvider, InlineImage, PromptMessage

SYSTEM_PROMPT = """You are Galaxy AI, a helpful, harmless, and honest AI assistant. \
You give helpful, detailed, and polite answers to the user's questions.

Current date: {today}

Guidelines:
- Be conversational and helpful
- If you're unsure about something, admit it
- Provide detailed explanations when asked
- Use markdown formatting for better readability
- If the user asks about images, analyze them carefully and provide detailed descriptions
- Earlier messages may come from the user's other conversations; use them as background only"""


def build_system_prompt(today: date | None = None) -> str:
    return SYSTEM_PROMPT.format(today=(today or date.today()).isoformat())


def get_llm_provider(provider: str) -> BaseLLMProvider:
    """Factory function that returns the provider client for a model's provider."""
    if provider == "openai":
        from galaxy_chat.services.llm.openai_provider import OpenAIProvider
        return OpenAIProvider()
    elif provider == "anthropic":
        from galaxy_chat.services.llm.anthropic_provider import AnthropicProvider
        return AnthropicProvider()
    elif provider == "gemini":
        from galaxy_chat.services.llm.gemini import GeminiProvider
        return GeminiProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {provider}")


__all__ = [
    "BaseLLMProvider",
    "InlineImage",
    "PromptMessage",
    "build_system_prompt",
    "get_llm_provider",
]
