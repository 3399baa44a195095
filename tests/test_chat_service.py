import asyncio
import uuid

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from api.features.chat.dtos import ChatRequest
from api.features.chat.entities import MessageRole
from api.features.chat.exceptions import (
    CompletionStreamError,
    ConversationNotFoundError,
    TitleGenerationError,
    UserMessageNotFoundError,
)
from api.features.chat.repositories import ConversationRepository, MessageRepository
from api.features.chat.service import (
    ChatService,
    delete_conversation,
    list_conversations,
    list_messages,
    rename_conversation,
    wait_for_pending_turns,
)
from api.features.chat.title_generator import TitleGenerator
from conftest import ScriptedChatModel


def make_service(database, chat_model, title_model):
    return ChatService(
        database=database,
        chat_model=chat_model,
        title_generator=TitleGenerator(title_model, model_name="title-model"),
        model_name="chat-model",
    )


def chat_request(*messages, conversation_id=None):
    return ChatRequest(
        conversation_id=conversation_id,
        messages=[{"role": role, "content": content} for role, content in messages],
    )


async def collect(tokens):
    return [token async for token in tokens]


async def stored_messages(database, conversation_id):
    async with database.get_session() as session:
        return await MessageRepository(session).list_for_conversation(conversation_id)


@pytest.mark.asyncio
async def test_new_conversation_streams_and_persists(
    database, db_session, chat_model, title_model
):
    service = make_service(database, chat_model, title_model)

    turn = await service.start_turn(
        chat_request(("user", "Hi")), user_id="user-a", db_session=db_session
    )

    assert turn.created is True
    assert turn.conversation.title == "Greeting from a new user"
    assert turn.conversation.owner_id == "user-a"
    assert await collect(turn.tokens) == ["Hello", " there", "!"]

    await wait_for_pending_turns()
    messages = await stored_messages(database, turn.conversation.id)
    assert [(m.role, m.content) for m in messages] == [
        (MessageRole.USER, "Hi"),
        (MessageRole.ASSISTANT, "Hello there!"),
    ]
    assert messages[0].created_at <= messages[1].created_at


@pytest.mark.asyncio
async def test_existing_conversation_keeps_title_and_sends_history(
    database, db_session, chat_model, title_model
):
    conversation = await ConversationRepository(db_session).create_for_owner(
        owner_id="user-a", title="Kept"
    )
    await db_session.commit()
    service = make_service(database, chat_model, title_model)

    turn = await service.start_turn(
        chat_request(
            ("user", "Hi"),
            ("assistant", "Hello!"),
            ("user", "Tell me a joke"),
            conversation_id=conversation.id,
        ),
        user_id="user-a",
        db_session=db_session,
    )
    await collect(turn.tokens)
    await wait_for_pending_turns()

    assert turn.created is False
    assert turn.conversation.title == "Kept"
    assert title_model.calls == []
    history = chat_model.calls[0]
    assert [type(m) for m in history] == [HumanMessage, AIMessage, HumanMessage]
    assert history[-1].content == "Tell me a joke"
    messages = await stored_messages(database, conversation.id)
    assert [m.content for m in messages] == ["Tell me a joke", "Hello there!"]


@pytest.mark.asyncio
async def test_other_users_conversation_is_not_found(
    database, db_session, chat_model, title_model
):
    conversation = await ConversationRepository(db_session).create_for_owner(
        owner_id="user-b", title="Private"
    )
    await db_session.commit()
    service = make_service(database, chat_model, title_model)

    with pytest.raises(ConversationNotFoundError):
        await service.start_turn(
            chat_request(("user", "Hi"), conversation_id=conversation.id),
            user_id="user-a",
            db_session=db_session,
        )

    assert chat_model.calls == []
    assert await stored_messages(database, conversation.id) == []


@pytest.mark.asyncio
async def test_history_without_user_message_is_rejected_before_any_call(
    database, db_session, chat_model, title_model
):
    service = make_service(database, chat_model, title_model)

    with pytest.raises(UserMessageNotFoundError):
        await service.start_turn(
            chat_request(("assistant", "How can I help?")),
            user_id="user-a",
            db_session=db_session,
        )

    assert title_model.calls == []
    assert chat_model.calls == []
    _, total = await list_conversations(db_session, owner_id="user-a", page=1, limit=15)
    assert total == 0


@pytest.mark.asyncio
async def test_title_failure_creates_nothing(database, db_session, chat_model):
    failing_titles = ScriptedChatModel(error=RuntimeError("provider down"))
    service = make_service(database, chat_model, failing_titles)

    with pytest.raises(TitleGenerationError):
        await service.start_turn(
            chat_request(("user", "Hi")), user_id="user-a", db_session=db_session
        )

    assert chat_model.calls == []
    _, total = await list_conversations(db_session, owner_id="user-a", page=1, limit=15)
    assert total == 0


@pytest.mark.asyncio
async def test_stream_failure_leaves_conversation_without_messages(
    database, db_session, title_model
):
    broken = ScriptedChatModel(chunks=["partial"], error=RuntimeError("connection reset"))
    service = make_service(database, broken, title_model)

    turn = await service.start_turn(
        chat_request(("user", "Hi")), user_id="user-a", db_session=db_session
    )
    turn_task = next(
        t for t in asyncio.all_tasks() if t.get_name() == f"chat-turn-{turn.conversation.id}"
    )
    received = []
    with pytest.raises(CompletionStreamError) as exc_info:
        async for token in turn.tokens:
            received.append(token)
    await wait_for_pending_turns()

    assert received == ["partial"]
    assert exc_info.value.message == "Chat completion service unavailable"
    assert exc_info.value.details["error"] == "connection reset"
    # The failure reaches the caller through the relay only; the task itself ends cleanly
    assert turn_task.exception() is None
    _, total = await list_conversations(
        db_session, owner_id="user-a", page=1, limit=15
    )
    assert total == 1
    assert await stored_messages(database, turn.conversation.id) == []


@pytest.mark.asyncio
async def test_client_disconnect_still_persists_full_reply(
    database, db_session, chat_model, title_model
):
    service = make_service(database, chat_model, title_model)

    turn = await service.start_turn(
        chat_request(("user", "Hi")), user_id="user-a", db_session=db_session
    )
    assert await turn.tokens.__anext__() == "Hello"
    await turn.tokens.aclose()
    await wait_for_pending_turns()

    messages = await stored_messages(database, turn.conversation.id)
    assert [m.content for m in messages] == ["Hi", "Hello there!"]


@pytest.mark.asyncio
async def test_rename_and_delete_are_owner_scoped(db_session):
    conversation = await ConversationRepository(db_session).create_for_owner(
        owner_id="user-a", title="Before"
    )
    await db_session.commit()

    with pytest.raises(ConversationNotFoundError):
        await rename_conversation(
            db_session, conversation_id=conversation.id, owner_id="user-b", title="Hijack"
        )
    with pytest.raises(ConversationNotFoundError):
        await delete_conversation(
            db_session, conversation_id=conversation.id, owner_id="user-b"
        )

    renamed = await rename_conversation(
        db_session, conversation_id=conversation.id, owner_id="user-a", title="After"
    )
    assert renamed.title == "After"

    deleted = await delete_conversation(
        db_session, conversation_id=conversation.id, owner_id="user-a"
    )
    assert deleted.id == conversation.id
    with pytest.raises(ConversationNotFoundError):
        await list_messages(
            db_session, conversation_id=conversation.id, owner_id="user-a"
        )


@pytest.mark.asyncio
async def test_unknown_conversation_id(db_session):
    with pytest.raises(ConversationNotFoundError):
        await list_messages(
            db_session, conversation_id=str(uuid.uuid4()), owner_id="user-a"
        )
