"""Sandboxed file access - keeps locally stored uploads inside the data directory."""

from pathlib import Path

from galaxy_chat.core.config import settings


class SandboxError(Exception):
    pass


def resolve_sandboxed_path(relative_path: str) -> Path:
    """Resolve a relative path within the sandbox. Raises SandboxError if path escapes."""
    data_dir = settings.data_dir.resolve()
    resolved = (data_dir / relative_path.lstrip("/")).resolve()

    if not resolved.is_relative_to(data_dir):
        raise SandboxError(f"Path '{relative_path}' escapes the sandbox")

    return resolved


def upload_path_from_url(url: str) -> Path:
    """Map a local '/uploads/<name>' URL to its file inside the sandbox."""
    if not url.startswith("/uploads/"):
        raise SandboxError(f"'{url}' is not a local upload URL")
    return resolve_sandboxed_path(url)
