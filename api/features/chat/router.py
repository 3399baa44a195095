"""Router for the Chat feature."""
from typing import List

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.di.container import ApplicationContainer as DependencyContainer
from api.features.auth.dependencies import require_auth
from api.features.auth.dtos import AuthContext
from api.features.chat.controller import ChatController
from api.features.chat.dtos import (
    ChatRequest,
    ConversationDTO,
    MessageDTO,
    RenameConversationRequest,
)
from api.shared.db import get_db_session
from api.shared.response import PaginatedResponseModel, ResponseModel

router = APIRouter()

CONVERSATION_ID_HEADER = "X-Conversation-Id"


@router.post("", response_class=StreamingResponse)
@inject
async def chat(
    request: ChatRequest,
    auth: AuthContext = Depends(require_auth),
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Run one chat turn and stream the assistant's reply as plain text."""
    turn = await controller.start_turn(
        request=request, auth=auth, db_session=db_session
    )
    return StreamingResponse(
        turn.tokens,
        media_type="text/plain; charset=utf-8",
        headers={CONVERSATION_ID_HEADER: turn.conversation.id},
    )


@router.get("", response_model=PaginatedResponseModel[ConversationDTO])
@inject
async def list_conversations(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(15, ge=10, le=50, description="Conversations per page"),
    auth: AuthContext = Depends(require_auth),
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    items, pagination = await controller.list_conversations(
        auth=auth, page=page, limit=limit, db_session=db_session
    )
    return PaginatedResponseModel.ok(
        data=items,
        pagination=pagination,
        message="Conversations fetched successfully!",
    )


@router.get("/{conversation_id}", response_model=ResponseModel[ConversationDTO])
@inject
async def get_conversation(
    conversation_id: str,
    auth: AuthContext = Depends(require_auth),
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    conv = await controller.get_conversation(
        conversation_id=conversation_id, auth=auth, db_session=db_session
    )
    return ResponseModel.ok(data=conv, message="Conversation fetched successfully!")


@router.patch("/{conversation_id}", response_model=ResponseModel[ConversationDTO])
@inject
async def rename_conversation(
    conversation_id: str,
    request: RenameConversationRequest,
    auth: AuthContext = Depends(require_auth),
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    conv = await controller.rename_conversation(
        conversation_id=conversation_id,
        request=request,
        auth=auth,
        db_session=db_session,
    )
    return ResponseModel.ok(data=conv, message="Conversation title updated!")


@router.delete("/{conversation_id}", response_model=ResponseModel[ConversationDTO])
@inject
async def delete_conversation(
    conversation_id: str,
    auth: AuthContext = Depends(require_auth),
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    conv = await controller.delete_conversation(
        conversation_id=conversation_id, auth=auth, db_session=db_session
    )
    return ResponseModel.ok(data=conv, message="Conversation deleted!")


@router.get(
    "/{conversation_id}/messages", response_model=ResponseModel[List[MessageDTO]]
)
@inject
async def get_messages(
    conversation_id: str,
    auth: AuthContext = Depends(require_auth),
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    items = await controller.get_messages(
        conversation_id=conversation_id, auth=auth, db_session=db_session
    )
    return ResponseModel.ok(data=items, message="Messages fetched successfully!")
