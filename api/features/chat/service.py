"""Chat service: conversation CRUD and the streaming chat turn.

A chat turn resolves (or creates) the conversation, starts the completion
stream in a detached task and relays tokens to the caller as they arrive.
The detached task owns the provider call and the final insert of the turn's
two messages, so a client that disconnects mid-stream does not stop the turn
from being recorded.
"""
import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator, List, Optional, Set, Tuple

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.chat.dtos import ChatMessageDTO, ChatRequest
from api.features.chat.messages import content_text, to_langchain_messages
from api.features.chat.entities.conversation import Conversation
from api.features.chat.entities.message import Message
from api.features.chat.exceptions import (
    CompletionStreamError,
    ConversationNotFoundError,
    UserMessageNotFoundError,
)
from api.features.chat.repositories import ConversationRepository, MessageRepository
from api.features.chat.title_generator import TitleGenerator
from api.shared.entities.base import utcnow
from api.shared.pagination import offset_for
from infra.resources import DatabaseResource

logger = structlog.get_logger("chat.service")

_END_OF_STREAM = object()

# Strong references to in-flight turns; asyncio only keeps weak ones.
_pending_turns: Set[asyncio.Task] = set()


async def wait_for_pending_turns() -> None:
    """Wait until every in-flight turn has finished streaming and persisting."""
    if _pending_turns:
        await asyncio.gather(*list(_pending_turns), return_exceptions=True)


# ---------------- Conversation CRUD ----------------


async def get_conversation(
    session: AsyncSession, *, conversation_id: str, owner_id: str
) -> Conversation:
    conversation = await ConversationRepository(session).get_owned(
        conversation_id, owner_id
    )
    if conversation is None:
        raise ConversationNotFoundError(conversation_id)
    return conversation


async def list_conversations(
    session: AsyncSession, *, owner_id: str, page: int, limit: int
) -> Tuple[List[Conversation], int]:
    """One page of the owner's conversations, newest first, plus the owner's total."""
    return await ConversationRepository(session).list_for_owner(
        owner_id, offset=offset_for(page, limit), limit=limit
    )


async def rename_conversation(
    session: AsyncSession, *, conversation_id: str, owner_id: str, title: str
) -> Conversation:
    conversation = await get_conversation(
        session, conversation_id=conversation_id, owner_id=owner_id
    )
    conversation = await ConversationRepository(session).rename(conversation, title)
    await session.commit()
    return conversation


async def delete_conversation(
    session: AsyncSession, *, conversation_id: str, owner_id: str
) -> Conversation:
    """Delete the conversation with its messages and return the deleted row."""
    conversation = await get_conversation(
        session, conversation_id=conversation_id, owner_id=owner_id
    )
    await ConversationRepository(session).delete_with_messages(conversation)
    await session.commit()
    return conversation


async def list_messages(
    session: AsyncSession, *, conversation_id: str, owner_id: str
) -> List[Message]:
    conversation = await get_conversation(
        session, conversation_id=conversation_id, owner_id=owner_id
    )
    return await MessageRepository(session).list_for_conversation(conversation.id)


# ---------------- Streaming chat turn ----------------


@dataclass(frozen=True)
class ChatTurn:
    """A started turn: the resolved conversation and the live token stream."""

    conversation: Conversation
    created: bool
    tokens: AsyncIterator[str]


class ChatService:
    """Runs chat turns against the configured chat model."""

    def __init__(
        self,
        database: DatabaseResource,
        chat_model: BaseChatModel,
        title_generator: TitleGenerator,
        model_name: str,
    ):
        self.database = database
        self.chat_model = chat_model
        self.title_generator = title_generator
        self.model_name = model_name

    async def start_turn(
        self, request: ChatRequest, *, user_id: str, db_session: AsyncSession
    ) -> ChatTurn:
        """Resolve the conversation and start streaming the model's reply.

        Raises before any write or provider call when the history holds no
        user message, and before the completion starts when the conversation
        is missing or the title cannot be generated.
        """
        user_message = request.most_recent_user_message()
        if user_message is None:
            raise UserMessageNotFoundError()

        conversation, created = await self._resolve_conversation(
            request.conversation_id,
            user_message,
            user_id=user_id,
            db_session=db_session,
        )

        queue: asyncio.Queue = asyncio.Queue()
        task = asyncio.create_task(
            self._run_turn(
                queue,
                conversation_id=conversation.id,
                history=to_langchain_messages(request.messages),
                user_content=user_message.content,
                accepted_at=utcnow(),
            ),
            name=f"chat-turn-{conversation.id}",
        )
        _pending_turns.add(task)
        task.add_done_callback(self._on_turn_done)

        logger.info(
            "turn_started",
            conversation_id=conversation.id,
            user_id=user_id,
            created=created,
            history_length=len(request.messages),
        )
        return ChatTurn(
            conversation=conversation, created=created, tokens=self._relay(queue)
        )

    async def _resolve_conversation(
        self,
        conversation_id: Optional[str],
        user_message: ChatMessageDTO,
        *,
        user_id: str,
        db_session: AsyncSession,
    ) -> Tuple[Conversation, bool]:
        if conversation_id:
            conversation = await get_conversation(
                db_session, conversation_id=conversation_id, owner_id=user_id
            )
            return conversation, False

        title = await self.title_generator.generate(user_message.content)
        conversation = await ConversationRepository(db_session).create_for_owner(
            owner_id=user_id, title=title
        )
        await db_session.commit()
        return conversation, True

    async def _relay(self, queue: asyncio.Queue) -> AsyncIterator[str]:
        while True:
            item = await queue.get()
            if item is _END_OF_STREAM:
                return
            if isinstance(item, Exception):
                raise item
            yield item

    async def _run_turn(
        self,
        queue: asyncio.Queue,
        *,
        conversation_id: str,
        history: List[BaseMessage],
        user_content: str,
        accepted_at: datetime,
    ) -> None:
        chunks: List[str] = []
        start = time.time()
        try:
            async for chunk in self.chat_model.astream(history):
                text = content_text(chunk.content)
                if text:
                    chunks.append(text)
                    queue.put_nowait(text)
        except asyncio.CancelledError:
            queue.put_nowait(CompletionStreamError(conversation_id, "turn cancelled"))
            raise
        except Exception as e:
            # The relay re-raises this into the response, which logs the traceback
            queue.put_nowait(CompletionStreamError(conversation_id, str(e)))
            logger.warning(
                "turn_stream_failed",
                conversation_id=conversation_id,
                model=self.model_name,
                chunks=len(chunks),
                error=str(e),
            )
            return

        queue.put_nowait(_END_OF_STREAM)
        logger.info(
            "turn_streamed",
            conversation_id=conversation_id,
            model=self.model_name,
            chunks=len(chunks),
            latency_ms=int((time.time() - start) * 1000),
        )

        await self._persist_turn(
            conversation_id=conversation_id,
            user_content=user_content,
            assistant_content="".join(chunks),
            accepted_at=accepted_at,
        )

    async def _persist_turn(
        self,
        *,
        conversation_id: str,
        user_content: str,
        assistant_content: str,
        accepted_at: datetime,
    ) -> None:
        # The request's session may already be closed; use a fresh one.
        async with self.database.get_session() as session:
            await MessageRepository(session).create_turn(
                conversation_id=conversation_id,
                user_content=user_content,
                assistant_content=assistant_content,
                user_created_at=accepted_at,
                assistant_created_at=utcnow(),
            )
            await session.commit()
        logger.info("turn_persisted", conversation_id=conversation_id)

    def _on_turn_done(self, task: asyncio.Task) -> None:
        _pending_turns.discard(task)
        if task.cancelled():
            logger.warning("turn_cancelled", task=task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.error("turn_failed", task=task.get_name(), error=str(error), exc_info=error)
