"""DTOs for the Chat feature."""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from api.features.chat.entities.message import MessageRole
from api.shared.dtos import BaseDTO


class ChatMessageDTO(BaseDTO):
    """One message of the history sent by the client."""

    role: MessageRole = Field(description="Message role: user or assistant")
    content: str = Field(description="Message content")


class ChatRequest(BaseDTO):
    """Request to run one chat turn."""

    conversation_id: Optional[str] = Field(
        default=None, description="Existing conversation to continue"
    )
    messages: List[ChatMessageDTO] = Field(
        description="Full message history, most recent last"
    )

    @field_validator("messages")
    @classmethod
    def _require_messages(cls, value: List[ChatMessageDTO]) -> List[ChatMessageDTO]:
        if not value:
            raise ValueError("Messages are required!")
        return value

    def most_recent_user_message(self) -> Optional[ChatMessageDTO]:
        """The current-turn message: the last one authored by the user."""
        for message in reversed(self.messages):
            if message.role == MessageRole.USER:
                return message
        return None


class RenameConversationRequest(BaseDTO):
    """Request to change a conversation title."""

    title: str = Field(description="New conversation title")

    @field_validator("title")
    @classmethod
    def _require_title(cls, value: str) -> str:
        if len(value) < 1:
            raise ValueError("Title is required")
        return value


class ConversationDTO(BaseDTO):
    """Conversation DTO."""

    id: str = Field(description="Conversation identifier")
    title: str = Field(description="Conversation title")
    owner_id: str = Field(description="Owning user identifier")
    created_at: datetime = Field(description="Creation timestamp")


class MessageDTO(BaseDTO):
    """Conversation message DTO."""

    id: str = Field(description="Message identifier")
    conversation_id: str = Field(description="Conversation identifier")
    role: MessageRole = Field(description="Message role: user or assistant")
    content: str = Field(description="Message content")
    created_at: datetime = Field(description="Creation timestamp")
