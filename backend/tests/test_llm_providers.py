"""Tests for provider message conversion and the provider factory."""

from datetime import date

import pytest

from galaxy_chat.services.llm import build_system_prompt, get_llm_provider
from galaxy_chat.services.llm.anthropic_provider import AnthropicProvider
from galaxy_chat.services.llm.base import InlineImage, PromptMessage
from galaxy_chat.services.llm.gemini import GeminiProvider
from galaxy_chat.services.llm.openai_provider import OpenAIProvider

PNG = InlineImage(mime_type="image/png", data=b"\x89PNG")


def test_openai_text_message():
    assert OpenAIProvider._to_openai(PromptMessage(role="user", content="hi")) == {"role": "user", "content": "hi"}


def test_openai_image_message():
    converted = OpenAIProvider._to_openai(PromptMessage(role="user", content="what is this?", images=[PNG]))
    assert converted["content"][0] == {"type": "text", "text": "what is this?"}
    assert converted["content"][1]["image_url"]["url"] == "data:image/png;base64,iVBORw=="


def test_anthropic_image_message():
    converted = AnthropicProvider._to_anthropic(PromptMessage(role="user", content="describe", images=[PNG]))
    image, text = converted["content"]
    assert image["source"] == {"type": "base64", "media_type": "image/png", "data": "iVBORw=="}
    assert text == {"type": "text", "text": "describe"}


def test_gemini_roles():
    content = GeminiProvider._to_content(PromptMessage(role="assistant", content="earlier reply"))
    assert content.role == "model"
    assert content.parts[0].text == "earlier reply"

    with_image = GeminiProvider._to_content(PromptMessage(role="user", content="look", images=[PNG]))
    assert with_image.role == "user"
    assert len(with_image.parts) == 2


def test_unknown_provider():
    with pytest.raises(ValueError):
        get_llm_provider("mystery")


def test_system_prompt_carries_date():
    prompt = build_system_prompt(date(2025, 3, 1))
    assert "Galaxy AI" in prompt
    assert "Current date: 2025-03-01" in prompt
