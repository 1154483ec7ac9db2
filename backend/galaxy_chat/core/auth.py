"""Request identity.

Sign-in is handled by an external identity provider sitting in front of this
service; it forwards the authenticated user id in a header. Requests without
the header run in demo mode: they can chat and upload but nothing is persisted.
"""

from fastapi import Depends, HTTPException, Request

from galaxy_chat.core.config import settings


async def get_current_user_id(request: Request) -> str | None:
    user_id = request.headers.get(settings.auth_user_header, "").strip()
    return user_id or None


async def require_user_id(user_id: str | None = Depends(get_current_user_id)) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id
