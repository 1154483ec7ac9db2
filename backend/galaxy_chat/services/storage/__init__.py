"""Object storage factory."""

import logging
from typing import Optional

from galaxy_chat.core.config import Settings
from galaxy_chat.services.storage.base import (
    BaseStorage,
    StorageError,
    StoredFile,
    UploadValidationError,
    validate_upload,
)
from galaxy_chat.services.storage.cloudinary_storage import CloudinaryStorage
from galaxy_chat.services.storage.local import LocalStorage

logger = logging.getLogger(__name__)


class FallbackStorage(BaseStorage):
    """Upload to the primary storage, falling back to another when it fails."""

    def __init__(self, primary: BaseStorage, fallback: BaseStorage):
        self.primary = primary
        self.fallback = fallback
        self.name = primary.name

    async def upload(
        self, data: bytes, filename: str, content_type: str, folder: str = "galaxy-chat/uploads"
    ) -> StoredFile:
        try:
            return await self.primary.upload(data, filename, content_type, folder)
        except StorageError as e:
            logger.error(f"{self.primary.name} upload failed, falling back to {self.fallback.name}: {e}")
            return await self.fallback.upload(data, filename, content_type, folder)

    def _for_url(self, url: str) -> Optional[BaseStorage]:
        for storage in (self.primary, self.fallback):
            if storage.owns(url):
                return storage
        return None

    async def delete(self, public_id: str) -> None:
        await self.primary.delete(public_id)

    def owns(self, url: str) -> bool:
        return self._for_url(url) is not None

    async def pdf_page_urls(self, url: str, max_pages: int = 10) -> list[str]:
        storage = self._for_url(url)
        return await storage.pdf_page_urls(url, max_pages) if storage else []

    async def check_connection(self):
        return await self.primary.check_connection()


def create_storage(settings: Settings) -> BaseStorage:
    """Cloudinary with local fallback when configured, otherwise local only."""
    local = LocalStorage()
    if not settings.cloudinary_configured:
        logger.warning("Cloudinary not configured, uploads will be stored locally")
        return local
    cloudinary = CloudinaryStorage(
        settings.cloudinary_cloud_name,
        settings.cloudinary_api_key,
        settings.cloudinary_api_secret,
    )
    return FallbackStorage(cloudinary, local)


__all__ = [
    "BaseStorage",
    "CloudinaryStorage",
    "FallbackStorage",
    "LocalStorage",
    "StorageError",
    "StoredFile",
    "UploadValidationError",
    "create_storage",
    "validate_upload",
]
