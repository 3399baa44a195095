"""Message repository."""
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import select

from api.features.chat.entities.message import Message, MessageRole
from api.shared.base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    """Repository for messages; rows are only ever inserted, never updated."""

    model = Message

    async def list_for_conversation(self, conversation_id: str) -> List[Message]:
        """All messages of a conversation in insertion order."""
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_turn(
        self,
        *,
        conversation_id: str,
        user_content: str,
        assistant_content: str,
        user_created_at: datetime,
        assistant_created_at: datetime,
    ) -> Tuple[Message, Message]:
        """Insert the user message and the assistant reply of one turn together."""
        user_message, assistant_message = await self.create_many(
            [
                Message(
                    conversation_id=conversation_id,
                    role=MessageRole.USER,
                    content=user_content,
                    created_at=user_created_at,
                ),
                Message(
                    conversation_id=conversation_id,
                    role=MessageRole.ASSISTANT,
                    content=assistant_content,
                    created_at=assistant_created_at,
                ),
            ]
        )
        return user_message, assistant_message
