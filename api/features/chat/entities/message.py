"""Message entity: one immutable turn half (user prompt or assistant reply)."""
from enum import Enum

from sqlalchemy import Enum as SQLEnum, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import IdentifiedEntity


class MessageRole(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(IdentifiedEntity):
    """Message persisted once per turn half, never updated."""

    conversation_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("conversation.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[MessageRole] = mapped_column(
        SQLEnum(
            MessageRole,
            native_enum=False,
            length=20,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
