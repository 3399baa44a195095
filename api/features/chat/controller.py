"""Controller for the Chat feature."""
from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.auth.dtos import AuthContext
from api.features.chat.dtos import (
    ChatRequest,
    ConversationDTO,
    MessageDTO,
    RenameConversationRequest,
)
from api.features.chat.service import (
    ChatService,
    ChatTurn,
    delete_conversation as svc_delete,
    get_conversation as svc_get,
    list_conversations as svc_list,
    list_messages as svc_messages,
    rename_conversation as svc_rename,
)
from api.shared.dtos import PaginationDTO
from api.shared.pagination import build_pagination


class ChatController:
    """Controller handling chat turns and owner-scoped conversation operations."""

    def __init__(self, chat_service: ChatService) -> None:
        self.chat_service = chat_service

    async def start_turn(
        self,
        *,
        request: ChatRequest,
        auth: AuthContext,
        db_session: AsyncSession,
    ) -> ChatTurn:
        return await self.chat_service.start_turn(
            request, user_id=auth.user_id, db_session=db_session
        )

    async def list_conversations(
        self,
        *,
        auth: AuthContext,
        page: int,
        limit: int,
        db_session: AsyncSession,
    ) -> Tuple[List[ConversationDTO], PaginationDTO]:
        items, total = await svc_list(
            db_session, owner_id=auth.user_id, page=page, limit=limit
        )
        dtos = [ConversationDTO.model_validate(c) for c in items]
        return dtos, build_pagination(page, limit, total)

    async def get_conversation(
        self,
        *,
        conversation_id: str,
        auth: AuthContext,
        db_session: AsyncSession,
    ) -> ConversationDTO:
        conv = await svc_get(
            db_session, conversation_id=conversation_id, owner_id=auth.user_id
        )
        return ConversationDTO.model_validate(conv)

    async def rename_conversation(
        self,
        *,
        conversation_id: str,
        request: RenameConversationRequest,
        auth: AuthContext,
        db_session: AsyncSession,
    ) -> ConversationDTO:
        conv = await svc_rename(
            db_session,
            conversation_id=conversation_id,
            owner_id=auth.user_id,
            title=request.title,
        )
        return ConversationDTO.model_validate(conv)

    async def delete_conversation(
        self,
        *,
        conversation_id: str,
        auth: AuthContext,
        db_session: AsyncSession,
    ) -> ConversationDTO:
        conv = await svc_delete(
            db_session, conversation_id=conversation_id, owner_id=auth.user_id
        )
        return ConversationDTO.model_validate(conv)

    async def get_messages(
        self,
        *,
        conversation_id: str,
        auth: AuthContext,
        db_session: AsyncSession,
    ) -> List[MessageDTO]:
        msgs = await svc_messages(
            db_session, conversation_id=conversation_id, owner_id=auth.user_id
        )
        return [MessageDTO.model_validate(m) for m in msgs]
