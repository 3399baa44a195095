"""Conversation repository: every query is scoped to the owning user."""
from typing import List, Optional, Tuple

from sqlalchemy import delete

from api.features.chat.entities.conversation import Conversation
from api.features.chat.entities.message import Message
from api.shared.base import BaseRepository
from api.shared.utils import is_valid_uuid


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversations with owner-scoped queries."""

    model = Conversation

    async def get_owned(
        self, conversation_id: str, owner_id: str
    ) -> Optional[Conversation]:
        """Get a conversation only if it belongs to ``owner_id``."""
        if not is_valid_uuid(conversation_id):
            return None
        entities = await self.get_by_fields(id=conversation_id, owner_id=owner_id)
        return entities[0] if entities else None

    async def create_for_owner(self, *, owner_id: str, title: str) -> Conversation:
        return await self.create(Conversation(owner_id=owner_id, title=title))

    async def list_for_owner(
        self, owner_id: str, *, offset: int = 0, limit: int = 15
    ) -> Tuple[List[Conversation], int]:
        """Newest first, with the owner's total for pagination."""
        return await self.list(
            offset=offset, limit=limit, order_by="-created_at", owner_id=owner_id
        )

    async def rename(self, conversation: Conversation, title: str) -> Conversation:
        conversation.title = title
        return await self.update(conversation)

    async def delete_with_messages(self, conversation: Conversation) -> bool:
        """Delete a conversation and its messages in the current transaction."""
        await self.session.execute(
            delete(Message).where(Message.conversation_id == conversation.id)
        )
        return await self.delete(conversation.id)
