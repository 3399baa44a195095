from api.features.chat.entities.conversation import Conversation
from api.features.chat.entities.message import Message, MessageRole

__all__ = ["Conversation", "Message", "MessageRole"]
