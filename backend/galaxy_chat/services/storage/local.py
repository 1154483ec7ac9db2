"""Local disk storage under the sandboxed data directory, served at /uploads."""

import io
import logging
import time
from pathlib import PurePath
from uuid import uuid4

from PIL import Image, UnidentifiedImageError

from galaxy_chat.core.sandbox import SandboxError, resolve_sandboxed_path
from galaxy_chat.services.storage.base import BaseStorage, StorageError, StoredFile

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"


def _image_size(data: bytes) -> tuple[int | None, int | None]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.width, img.height
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Could not read image dimensions: {e}")
        return None, None


class LocalStorage(BaseStorage):
    name = "local"

    async def upload(
        self, data: bytes, filename: str, content_type: str, folder: str = "galaxy-chat/uploads"
    ) -> StoredFile:
        extension = PurePath(filename).suffix.lower()
        stored_name = f"{int(time.time() * 1000)}_{uuid4().hex[:10]}{extension}"
        try:
            path = resolve_sandboxed_path(f"uploads/{stored_name}")
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except (SandboxError, OSError) as e:
            raise StorageError(f"Failed to store {filename} locally: {e}") from e

        width = height = None
        if content_type.startswith("image/"):
            width, height = _image_size(data)

        logger.info(f"Stored {filename} locally as {stored_name}")
        return StoredFile(
            url=f"{URL_PREFIX}{stored_name}",
            public_id=stored_name,
            format=extension.lstrip("."),
            width=width,
            height=height,
            size=len(data),
        )

    async def delete(self, public_id: str) -> None:
        try:
            resolve_sandboxed_path(f"uploads/{public_id}").unlink(missing_ok=True)
        except (SandboxError, OSError) as e:
            raise StorageError(f"Failed to delete {public_id}: {e}") from e

    def owns(self, url: str) -> bool:
        return url.startswith(URL_PREFIX)
