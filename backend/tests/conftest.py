"""Shared test fixtures for backend tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from galaxy_chat.core.config import settings
from galaxy_chat.core.database import get_session
from galaxy_chat.models.chat import Chat, ChatMessage
from galaxy_chat.services.llm.base import BaseLLMProvider

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

USER_ID = "user_123"
AUTH = {"X-User-Id": USER_ID}

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def get_test_session():
    with Session(test_engine) as session:
        yield session


def seed_chat(
    user_id=USER_ID,
    title="Test Chat",
    messages=None,
    updated_at=None,
    is_archived=False,
    model_id="gpt-4o",
):
    """Insert a chat + messages directly into the test DB.

    `messages` is a list of (role, content) pairs; timestamps increase by a
    minute per message starting at `updated_at`.
    """
    updated_at = updated_at or BASE_TIME
    with Session(test_engine) as session:
        chat = Chat(
            user_id=user_id,
            title=title,
            model_id=model_id,
            is_archived=is_archived,
            created_at=updated_at,
            updated_at=updated_at,
        )
        chat.messages = [
            ChatMessage(
                message_id=f"{title}-{i}",
                position=i,
                role=role,
                content=content,
                timestamp=updated_at + timedelta(minutes=i),
            )
            for i, (role, content) in enumerate(messages or [])
        ]
        session.add(chat)
        session.commit()
        session.refresh(chat)
        return chat.id


class FakeProvider(BaseLLMProvider):
    """Provider that streams fixed tokens and records what it was sent."""

    def __init__(self, tokens=("Hello", " from", " model"), error=None):
        self.tokens = list(tokens)
        self.error = error
        self.calls = []

    async def chat_stream(self, messages, model, system_prompt=""):
        self.calls.append({"messages": messages, "model": model, "system_prompt": system_prompt})
        for token in self.tokens:
            yield token
        if self.error:
            raise self.error


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import galaxy_chat.models  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep uploads in a temp dir and storage local regardless of the environment."""
    monkeypatch.setattr(settings, "data_dir", tmp_path)
    monkeypatch.setattr(settings, "cloudinary_cloud_name", "")
    monkeypatch.setattr(settings, "cloudinary_api_key", "")
    monkeypatch.setattr(settings, "cloudinary_api_secret", "")


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def client(fake_provider):
    """FastAPI TestClient with all external deps patched."""
    with (
        patch("galaxy_chat.core.database.engine", test_engine),
        patch("galaxy_chat.api.chat.engine", test_engine),
        patch("galaxy_chat.api.chat.get_llm_provider", return_value=fake_provider),
    ):
        from galaxy_chat.main import app

        # Use FastAPI's dependency override for get_session
        app.dependency_overrides[get_session] = get_test_session

        with TestClient(app) as c:
            yield c

        app.dependency_overrides.clear()
