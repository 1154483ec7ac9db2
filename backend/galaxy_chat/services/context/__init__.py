"""Cross-chat context window assembly."""

from galaxy_chat.services.context.assembler import ContextAssembler
from galaxy_chat.services.context.retriever import retrieve_older_messages
from galaxy_chat.services.context.types import ChatSnapshot

__all__ = ["ChatSnapshot", "ContextAssembler", "retrieve_older_messages"]
