import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile
from fastapi.responses import FileResponse

from galaxy_chat.api.deps import get_model_registry, get_storage
from galaxy_chat.core.sandbox import SandboxError, upload_path_from_url
from galaxy_chat.services.model_registry import ModelRegistry
from galaxy_chat.services.storage import BaseStorage, StorageError, UploadValidationError, validate_upload

router = APIRouter()
# Serves files kept by local storage when Cloudinary is not configured
files_router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/")
async def upload_file(
    file: UploadFile,
    registry: ModelRegistry = Depends(get_model_registry),
    storage: BaseStorage = Depends(get_storage),
):
    """Upload an image or PDF for the next chat turn. Allowed without sign-in."""
    content = await file.read()
    content_type = file.content_type or ""
    logger.info(f"Upload request: {file.filename} ({content_type}, {len(content)} bytes) via {storage.name}")

    try:
        validate_upload(content_type, len(content), registry.supported_file_types, registry.max_file_size_mb)
    except UploadValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        stored = await storage.upload(content, file.filename or "upload", content_type)
    except StorageError as e:
        logger.error(f"Upload failed: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to upload file: {e}")

    logger.info(f"Upload successful: {stored.url}")
    return stored.to_dict()


@files_router.get("/{name}")
async def serve_upload(name: str):
    try:
        path = upload_path_from_url(f"/uploads/{name}")
    except SandboxError:
        raise HTTPException(status_code=403, detail="Access denied")
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path)
