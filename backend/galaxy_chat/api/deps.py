"""Shared request dependencies.

The model registry and storage backend are built once in the application
lifespan and read from app.state here.
"""

from typing import AsyncIterator

import httpx
from fastapi import Depends, Request
from sqlmodel import Session

from galaxy_chat.core.database import get_session
from galaxy_chat.services.chat_store import ChatStore
from galaxy_chat.services.model_registry import ModelRegistry
from galaxy_chat.services.storage import BaseStorage


def get_model_registry(request: Request) -> ModelRegistry:
    return request.app.state.model_registry


def get_storage(request: Request) -> BaseStorage:
    return request.app.state.storage


def get_chat_store(session: Session = Depends(get_session)) -> ChatStore:
    return ChatStore(session)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
        yield client
