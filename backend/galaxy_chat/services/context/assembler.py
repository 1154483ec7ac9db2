"""Context window assembly for one chat turn.

Combines the active conversation with a sample of the user's older chats into
a single bounded, chronologically ordered message list:

    [sampled current-chat history + older-chat sample, by timestamp] + [last 4 turns]

The last four messages of the active conversation are always kept and always
come last, in the order the caller sent them. The rest of the budget is split
between the active chat's earlier history (stride sampled when it does not
fit) and the older-chat sample. The sampling formulas are heuristics, so the
final list is clamped to the budget.
"""

import logging
import math
from typing import Optional

from galaxy_chat.models.message import Message
from galaxy_chat.services.context.retriever import DEFAULT_RECENT_CHAT_LIMIT, retrieve_older_messages
from galaxy_chat.services.context.types import FindRecentChats

logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGES = 65
RECENT_MESSAGE_COUNT = 4
CURRENT_CHAT_SHARE = 0.6


def stride_sample(messages: list[Message], slots: int) -> list[Message]:
    """Pick `slots` messages spread across `messages`, biased to the newest end."""
    if slots <= 0:
        return []
    if len(messages) <= slots:
        return list(messages)
    step = max(1, len(messages) // slots)
    start = len(messages) - slots * step
    return messages[start::step][:slots]


class ContextAssembler:
    """Builds the message list sent to the completion provider.

    `find_recent_chats` is the store capability used for older-chat context;
    tests pass an in-memory fake.
    """

    def __init__(
        self,
        find_recent_chats: FindRecentChats,
        recent_chat_limit: int = DEFAULT_RECENT_CHAT_LIMIT,
    ):
        self.find_recent_chats = find_recent_chats
        self.recent_chat_limit = recent_chat_limit

    async def assemble(
        self,
        current_messages: list[Message],
        user_id: Optional[str] = None,
        current_chat_id: Optional[str] = None,
        max_messages: int = DEFAULT_MAX_MESSAGES,
    ) -> list[Message]:
        recent = list(current_messages[-RECENT_MESSAGE_COUNT:])
        if max_messages <= 0:
            return []

        available = max_messages - RECENT_MESSAGE_COUNT
        if available <= 0:
            return recent[-max_messages:]

        older_current = list(current_messages[:-RECENT_MESSAGE_COUNT])
        gathered: list[Message] = []

        try:
            # Without an identity there is no older-chat slice, so the active
            # chat's history may use the whole remaining budget.
            if user_id:
                current_slots = math.floor(available * CURRENT_CHAT_SHARE)
            else:
                current_slots = available
            sampled = stride_sample(older_current, current_slots)
            gathered.extend(sampled)

            if user_id:
                older_budget = available - len(sampled)
                gathered.extend(
                    await retrieve_older_messages(
                        self.find_recent_chats,
                        user_id,
                        exclude_chat_id=current_chat_id,
                        max_older_messages=older_budget,
                        chat_limit=self.recent_chat_limit,
                    )
                )
        except Exception:
            logger.exception("Context assembly degraded; using partial context")

        gathered.sort(key=lambda m: m.sort_time)
        if len(gathered) > available:
            gathered = gathered[-available:]

        context = gathered + recent
        logger.debug(
            f"Assembled context: {len(context)} messages "
            f"({len(gathered)} older, {len(recent)} recent, budget {max_messages})"
        )
        return context
