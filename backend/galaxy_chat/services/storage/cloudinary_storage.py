"""Cloudinary object storage over its REST API."""

import hashlib
import logging
import re
import time
from typing import Any, Optional

import httpx

from galaxy_chat.services.storage.base import BaseStorage, StorageError, StoredFile

logger = logging.getLogger(__name__)

PDF_PAGE_TRANSFORMATION = "w_800,q_auto,f_auto"
_VERSION_SEGMENT = re.compile(r"^v\d+$")


def public_id_from_url(url: str) -> Optional[str]:
    """Extract the public id from a delivery URL like .../upload/v123/folder/name.pdf."""
    _, sep, path = url.partition("/upload/")
    if not sep or not path:
        return None
    segments = path.split("?")[0].split("/")
    if segments and _VERSION_SEGMENT.match(segments[0]):
        segments = segments[1:]
    if not segments or not segments[-1]:
        return None
    segments[-1] = segments[-1].rsplit(".", 1)[0]
    return "/".join(segments)


class CloudinaryStorage(BaseStorage):
    """Signed uploads and deletes; PDF pages rendered through delivery transformations."""

    name = "cloudinary"
    API_URL = "https://api.cloudinary.com/v1_1"
    DELIVERY_URL = "https://res.cloudinary.com"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=30.0)

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        signature = hashlib.sha1(f"{to_sign}{self._api_secret}".encode()).hexdigest()
        return {**params, "signature": signature, "api_key": self._api_key}

    @staticmethod
    def _resource_type(content_type: str) -> str:
        # PDFs are stored as image resources so individual pages can be rendered
        if content_type.startswith("image/") or content_type == "application/pdf":
            return "image"
        return "raw"

    async def upload(
        self, data: bytes, filename: str, content_type: str, folder: str = "galaxy-chat/uploads"
    ) -> StoredFile:
        resource_type = self._resource_type(content_type)
        logger.info(f"Uploading {filename} to Cloudinary folder {folder}")
        try:
            async with self._client() as client:
                resp = await client.post(
                    f"{self.API_URL}/{self.cloud_name}/{resource_type}/upload",
                    data=self._signed({"folder": folder}),
                    files={"file": (filename, data, content_type)},
                )
                resp.raise_for_status()
                result = resp.json()
        except httpx.HTTPError as e:
            raise StorageError(f"Failed to upload file to Cloudinary: {e}") from e

        logger.info(f"Cloudinary upload successful: {result.get('public_id')} ({result.get('bytes')} bytes)")
        return StoredFile(
            url=result["secure_url"],
            public_id=result["public_id"],
            format=result.get("format", ""),
            width=result.get("width"),
            height=result.get("height"),
            size=result.get("bytes"),
        )

    async def delete(self, public_id: str) -> None:
        logger.info(f"Deleting from Cloudinary: {public_id}")
        try:
            async with self._client() as client:
                resp = await client.post(
                    f"{self.API_URL}/{self.cloud_name}/image/destroy",
                    data=self._signed({"public_id": public_id}),
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageError(f"Failed to delete file from Cloudinary: {e}") from e

    def owns(self, url: str) -> bool:
        return url.startswith(f"{self.DELIVERY_URL}/{self.cloud_name}/")

    def page_url(self, public_id: str, page: int) -> str:
        return (
            f"{self.DELIVERY_URL}/{self.cloud_name}/image/upload/"
            f"pg_{page},{PDF_PAGE_TRANSFORMATION}/{public_id}.jpg"
        )

    async def pdf_page_urls(self, url: str, max_pages: int = 10) -> list[str]:
        public_id = public_id_from_url(url)
        if not public_id:
            return []

        pages: list[str] = []
        async with self._client() as client:
            for page in range(1, max_pages + 1):
                page_url = self.page_url(public_id, page)
                try:
                    resp = await client.head(page_url)
                except httpx.HTTPError as e:
                    logger.warning(f"Failed to render PDF page {page} of {public_id}: {e}")
                    break
                if not resp.is_success:
                    # Past the last page
                    break
                pages.append(page_url)
        logger.debug(f"PDF {public_id} expanded to {len(pages)} page images")
        return pages

    async def check_connection(self) -> tuple[bool, Optional[str]]:
        try:
            async with self._client() as client:
                resp = await client.get(
                    f"{self.API_URL}/{self.cloud_name}/usage",
                    auth=(self._api_key, self._api_secret),
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary connection test failed: {e}")
            return False, str(e)
        return True, None
