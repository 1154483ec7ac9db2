"""Diagnostics for the object storage configuration."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from galaxy_chat.api.deps import get_storage
from galaxy_chat.core.config import settings
from galaxy_chat.services.storage import BaseStorage

router = APIRouter()

SETUP_INSTRUCTIONS = [
    "1. Create a Cloudinary account at https://cloudinary.com/",
    "2. Copy the Cloud Name, API Key and API Secret from the dashboard",
    "3. Set GALAXY_CLOUDINARY_CLOUD_NAME, GALAXY_CLOUDINARY_API_KEY and GALAXY_CLOUDINARY_API_SECRET",
    "4. Restart the server",
]


@router.get("/check")
async def check_storage(storage: BaseStorage = Depends(get_storage)):
    env_check = {
        "cloudinary_cloud_name": bool(settings.cloudinary_cloud_name),
        "cloudinary_api_key": bool(settings.cloudinary_api_key),
        "cloudinary_api_secret": bool(settings.cloudinary_api_secret),
    }

    if not settings.cloudinary_configured:
        return JSONResponse(status_code=400, content={
            "success": False,
            "configured": False,
            "storage": storage.name,
            "message": "Cloudinary environment variables are not properly configured",
            "env_check": env_check,
            "instructions": SETUP_INSTRUCTIONS,
        })

    ok, error = await storage.check_connection()
    if not ok:
        return JSONResponse(status_code=500, content={
            "success": False,
            "configured": True,
            "storage": storage.name,
            "message": "Cloudinary connection failed",
            "error": error,
            "env_check": env_check,
        })

    return {
        "success": True,
        "configured": True,
        "storage": storage.name,
        "message": "Cloudinary is configured and reachable",
        "env_check": env_check,
    }
