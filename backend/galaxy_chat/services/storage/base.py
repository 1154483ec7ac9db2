"""Abstract object storage interface for uploaded chat attachments."""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Optional


class StorageError(Exception):
    pass


class UploadValidationError(ValueError):
    pass


@dataclass
class StoredFile:
    url: str
    public_id: str
    format: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


def validate_upload(content_type: str, size: int, allowed_types: list[str], max_size_mb: int) -> None:
    """Raise UploadValidationError if the file type or size is not accepted."""
    if content_type not in allowed_types:
        raise UploadValidationError(
            f"File type {content_type} is not allowed. Supported types: {', '.join(allowed_types)}"
        )
    max_size_bytes = max_size_mb * 1024 * 1024
    if size > max_size_bytes:
        raise UploadValidationError(
            f"File size {size / 1024 / 1024:.2f}MB exceeds maximum allowed size of {max_size_mb}MB"
        )


class BaseStorage(ABC):
    name: str = "storage"

    @abstractmethod
    async def upload(
        self, data: bytes, filename: str, content_type: str, folder: str = "galaxy-chat/uploads"
    ) -> StoredFile:
        """Store a file and return where it can be fetched from."""
        ...

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        ...

    @abstractmethod
    def owns(self, url: str) -> bool:
        """True if `url` points at a file held by this storage."""
        ...

    async def pdf_page_urls(self, url: str, max_pages: int = 10) -> list[str]:
        """Image URLs for the pages of a stored PDF; empty if pages cannot be rendered."""
        return []

    async def check_connection(self) -> tuple[bool, Optional[str]]:
        return True, None
