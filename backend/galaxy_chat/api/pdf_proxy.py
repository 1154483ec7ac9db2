"""Re-serve remotely stored PDFs inline so the browser can preview them."""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from galaxy_chat.api.deps import get_http_client

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/")
async def proxy_pdf(url: Optional[str] = None, client: httpx.AsyncClient = Depends(get_http_client)):
    if not url:
        raise HTTPException(status_code=400, detail="PDF URL is required")
    if not url.startswith(("https://", "http://")):
        raise HTTPException(status_code=400, detail="PDF URL must be http(s)")

    logger.debug(f"Proxying PDF: {url}")
    try:
        resp = await client.get(url)
    except httpx.HTTPError as e:
        logger.error(f"PDF proxy error for {url}: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch PDF")

    if not resp.is_success:
        logger.info(f"Failed to fetch PDF: {resp.status_code} {resp.reason_phrase}")
        raise HTTPException(status_code=resp.status_code, detail="Failed to fetch PDF")

    return Response(
        content=resp.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": "inline",
            "Cache-Control": "public, max-age=3600",
        },
    )
