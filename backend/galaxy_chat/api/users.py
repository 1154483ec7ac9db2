from fastapi import APIRouter, Depends

from galaxy_chat.api.deps import get_chat_store
from galaxy_chat.core.auth import require_user_id
from galaxy_chat.models.message import ensure_utc
from galaxy_chat.services.chat_store import ChatStore

router = APIRouter()


@router.get("/me")
async def get_me(user_id: str = Depends(require_user_id), store: ChatStore = Depends(get_chat_store)):
    user = store.get_user(user_id)
    if not user:
        return {"id": user_id, "total_chats": 0, "total_messages": 0, "last_active_at": None}
    return {
        "id": user.id,
        "total_chats": user.total_chats,
        "total_messages": user.total_messages,
        "last_active_at": ensure_utc(user.last_active_at).isoformat(),
    }
