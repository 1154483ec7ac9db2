"""Older-chat context: a bounded sample of the user's other conversations.

Gives the model some memory across sessions without letting the prompt grow
with the user's whole history. Recent chats get a larger share of the budget:
with N chats ordered by recency, chat i has weight max(1, N - i) and receives
max(1, floor(budget * weight / (N*(N+1)/2))) of its newest messages.
"""

import logging
import math
from typing import Optional

from galaxy_chat.models.message import Message
from galaxy_chat.services.context.types import ChatSnapshot, ContextCandidate, FindRecentChats

logger = logging.getLogger(__name__)

DEFAULT_MAX_OLDER_MESSAGES = 30
DEFAULT_RECENT_CHAT_LIMIT = 10


def allocate_slots(chat_sizes: list[int], budget: int) -> list[int]:
    """Split `budget` across chats ordered most recent first.

    Each chat gets at least one slot and never more than it has messages.
    The floor/max(1) rounding can push the sum over budget; callers clamp.
    """
    n = len(chat_sizes)
    if n == 0 or budget <= 0:
        return [0] * n
    total_weight = n * (n + 1) / 2
    slots = []
    for i, size in enumerate(chat_sizes):
        weight = max(1, n - i)
        allocated = max(1, math.floor(budget * weight / total_weight))
        slots.append(min(allocated, size))
    return slots


def _collect_candidates(chats: list[ChatSnapshot]) -> list[ContextCandidate]:
    candidates = [
        ContextCandidate(
            message=message,
            chat_id=chat.id,
            chat_title=chat.title,
            chat_updated_at=chat.updated_at,
        )
        for chat in chats
        for message in chat.messages
    ]
    candidates.sort(key=lambda c: c.message.sort_time, reverse=True)
    return candidates


async def retrieve_older_messages(
    find_recent_chats: FindRecentChats,
    user_id: str,
    exclude_chat_id: Optional[str] = None,
    max_older_messages: int = DEFAULT_MAX_OLDER_MESSAGES,
    chat_limit: int = DEFAULT_RECENT_CHAT_LIMIT,
) -> list[Message]:
    """Sample messages from the user's other chats, oldest first.

    Never raises; a failing store yields an empty list.
    """
    if max_older_messages <= 0:
        return []

    try:
        chats = await find_recent_chats(user_id, exclude_chat_id=exclude_chat_id, limit=chat_limit)
    except Exception:
        logger.exception(f"Failed to load older chats for user {user_id}")
        return []

    try:
        chats = [
            c for c in chats
            if c.messages and not c.is_archived and (exclude_chat_id is None or c.id != exclude_chat_id)
        ][:chat_limit]

        candidates = _collect_candidates(chats)
        if len(candidates) <= max_older_messages:
            selected = [c.message for c in candidates]
        else:
            slots = allocate_slots([len(c.messages) for c in chats], max_older_messages)
            selected = []
            for chat, count in zip(chats, slots):
                if count > 0:
                    selected.extend(chat.messages[-count:])

        selected = [m.model_copy(deep=True) for m in selected]
        selected.sort(key=lambda m: m.sort_time)
        if len(selected) > max_older_messages:
            selected = selected[-max_older_messages:]

        logger.debug(
            f"Older-chat context: {len(selected)} messages from {len(chats)} chats "
            f"({len(candidates)} candidates, budget {max_older_messages})"
        )
        return selected
    except Exception:
        logger.exception("Failed to sample older chat context")
        return []
