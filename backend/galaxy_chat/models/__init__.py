from galaxy_chat.models.chat import Chat, ChatMessage, User

__all__ = ["Chat", "ChatMessage", "User"]
