import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from galaxy_chat.core.config import settings
from galaxy_chat.core.database import init_db
from galaxy_chat.api import chat, chats, pdf_proxy, storage_check, uploads, users
from galaxy_chat.services.model_registry import ModelRegistry
from galaxy_chat.services.storage import create_storage


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Configure logging based on debug setting
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s" if settings.debug
        else "%(levelname)-8s %(name)s: %(message)s",
    )

    init_db()
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)

    # Process-wide configuration, shared by reference with request handlers
    app.state.model_registry = ModelRegistry.load(settings.models_config_path)
    app.state.storage = create_storage(settings)

    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["x-chat-id"],
)

app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
app.include_router(chats.router, prefix="/api/chats", tags=["chats"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(uploads.router, prefix="/api/upload", tags=["uploads"])
app.include_router(pdf_proxy.router, prefix="/api/pdf-proxy", tags=["uploads"])
app.include_router(storage_check.router, prefix="/api/storage", tags=["storage"])
app.include_router(uploads.files_router, prefix="/uploads", tags=["uploads"])


@app.get("/api/health")
async def health():
    return {"status": "ok", "app": settings.app_name}
