import uuid
from datetime import timedelta

import pytest

from api.features.chat.entities import MessageRole
from api.features.chat.repositories import ConversationRepository, MessageRepository
from api.shared.entities.base import utcnow


@pytest.mark.asyncio
async def test_get_owned_is_scoped_to_owner(db_session):
    repo = ConversationRepository(db_session)
    conversation = await repo.create_for_owner(owner_id="user-a", title="Trip plans")
    await db_session.commit()

    assert (await repo.get_owned(conversation.id, "user-a")).title == "Trip plans"
    assert await repo.get_owned(conversation.id, "user-b") is None
    assert await repo.get_owned(str(uuid.uuid4()), "user-a") is None


@pytest.mark.asyncio
async def test_get_owned_rejects_malformed_id(db_session):
    repo = ConversationRepository(db_session)

    assert await repo.get_owned("not-a-uuid", "user-a") is None


@pytest.mark.asyncio
async def test_list_for_owner_newest_first_with_total(db_session, seed_conversations):
    await seed_conversations("user-a", 12)
    await seed_conversations("user-b", 3)

    items, total = await ConversationRepository(db_session).list_for_owner(
        "user-a", offset=10, limit=10
    )

    assert total == 12
    assert [c.title for c in items] == ["Conversation 1", "Conversation 0"]
    assert all(c.owner_id == "user-a" for c in items)


@pytest.mark.asyncio
async def test_rename_changes_only_the_title(db_session):
    repo = ConversationRepository(db_session)
    conversation = await repo.create_for_owner(owner_id="user-a", title="Old")
    await db_session.commit()
    before = (conversation.id, conversation.owner_id, conversation.created_at)

    renamed = await repo.rename(conversation, "New")
    await db_session.commit()

    assert renamed.title == "New"
    assert (renamed.id, renamed.owner_id, renamed.created_at) == before


@pytest.mark.asyncio
async def test_create_turn_and_list_in_order(db_session):
    conversation = await ConversationRepository(db_session).create_for_owner(
        owner_id="user-a", title="Chat"
    )
    accepted_at = utcnow()
    messages = MessageRepository(db_session)
    user_msg, assistant_msg = await messages.create_turn(
        conversation_id=conversation.id,
        user_content="Hi",
        assistant_content="Hello!",
        user_created_at=accepted_at,
        assistant_created_at=accepted_at + timedelta(seconds=2),
    )
    await db_session.commit()

    listed = await messages.list_for_conversation(conversation.id)

    assert [m.id for m in listed] == [user_msg.id, assistant_msg.id]
    assert [m.role for m in listed] == [MessageRole.USER, MessageRole.ASSISTANT]
    assert listed[1].content == "Hello!"


@pytest.mark.asyncio
async def test_delete_with_messages_removes_everything(db_session):
    conversations = ConversationRepository(db_session)
    messages = MessageRepository(db_session)
    conversation = await conversations.create_for_owner(owner_id="user-a", title="Chat")
    await messages.create_turn(
        conversation_id=conversation.id,
        user_content="Hi",
        assistant_content="Hello!",
        user_created_at=utcnow(),
        assistant_created_at=utcnow(),
    )
    await db_session.commit()

    assert await conversations.delete_with_messages(conversation) is True
    await db_session.commit()

    assert await conversations.get_owned(conversation.id, "user-a") is None
    assert await messages.list_for_conversation(conversation.id) == []


@pytest.mark.asyncio
async def test_filters_reject_unknown_columns(db_session):
    repo = ConversationRepository(db_session)

    with pytest.raises(ValueError):
        await repo.get_by_fields(ownerid="user-a")
    with pytest.raises(ValueError):
        await repo.list(owner="user-a")


@pytest.mark.asyncio
async def test_missing_owner_matches_nothing(db_session):
    repo = ConversationRepository(db_session)
    conversation = await repo.create_for_owner(owner_id="user-a", title="Mine")
    await db_session.commit()

    assert await repo.get_owned(conversation.id, None) is None
    assert await repo.get_by_fields(id=conversation.id, owner_id=None) == []
    items, total = await repo.list_for_owner(None)
    assert (items, total) == ([], 0)
