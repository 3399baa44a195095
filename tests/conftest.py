from datetime import timedelta
from typing import List, Optional

import pytest
import pytest_asyncio
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient
from langchain_core.messages import AIMessage, AIMessageChunk

from api.features.auth.entities import Session, User
from api.features.chat.entities import Conversation
from api.features.chat.service import wait_for_pending_turns
from api.main import create_fastapi_app
from api.shared.entities.base import utcnow
from api.shared.entities.registry import BaseEntity
from infra.resources import DatabaseResource

AUTH_A = {"Authorization": "Bearer token-a"}
AUTH_B = {"Authorization": "Bearer token-b"}
AUTH_EXPIRED = {"Authorization": "Bearer token-expired"}


class ScriptedChatModel:
    """Chat model double: streams fixed chunks, answers ``ainvoke`` with ``reply``.

    When ``error`` is set, ``astream`` raises it after the chunks and
    ``ainvoke`` raises it right away. Every call's messages are recorded.
    """

    def __init__(
        self,
        chunks: Optional[List[str]] = None,
        reply: str = "A scripted title",
        error: Optional[Exception] = None,
    ):
        self.chunks = ["Hello", " there", "!"] if chunks is None else chunks
        self.reply = reply
        self.error = error
        self.calls: List[list] = []

    async def ainvoke(self, messages, **kwargs):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)

    async def astream(self, messages, **kwargs):
        self.calls.append(list(messages))
        for chunk in self.chunks:
            yield AIMessageChunk(content=chunk)
        if self.error is not None:
            raise self.error


@pytest.fixture
def chat_model():
    return ScriptedChatModel()


@pytest.fixture
def title_model():
    return ScriptedChatModel(reply="  Greeting from a new user \n")


@pytest_asyncio.fixture
async def database(tmp_path):
    db = DatabaseResource(f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}")
    await db.init()
    async with db.engine.begin() as conn:
        await conn.run_sync(BaseEntity.metadata.create_all)
    yield db
    await wait_for_pending_turns()
    await db.shutdown()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.get_session() as session:
        yield session


@pytest_asyncio.fixture
async def users(database):
    """Users A and B with live sessions, user C with an expired one."""
    now = utcnow()
    async with database.get_session() as session:
        for user_id, token, expires_at in (
            ("user-a", "token-a", now + timedelta(days=1)),
            ("user-b", "token-b", now + timedelta(days=1)),
            ("user-c", "token-expired", now - timedelta(minutes=1)),
        ):
            session.add(User(id=user_id, name=user_id, email=f"{user_id}@example.com"))
            session.add(
                Session(
                    id=f"session-{user_id}",
                    token=token,
                    user_id=user_id,
                    expires_at=expires_at,
                )
            )
        await session.commit()


@pytest.fixture
def seed_conversations(database):
    """Insert conversations one minute apart, oldest first."""

    async def _seed(owner_id: str, count: int) -> List[Conversation]:
        start = utcnow() - timedelta(days=1)
        async with database.get_session() as session:
            conversations = [
                Conversation(
                    owner_id=owner_id,
                    title=f"Conversation {i}",
                    created_at=start + timedelta(minutes=i),
                )
                for i in range(count)
            ]
            session.add_all(conversations)
            await session.commit()
        return conversations

    return _seed


@pytest_asyncio.fixture
async def app(database, chat_model, title_model):
    application = create_fastapi_app()
    infrastructure = application.container.infrastructure
    infrastructure.database.override(providers.Object(database))
    infrastructure.chat_model.override(providers.Object(chat_model))
    infrastructure.title_model.override(providers.Object(title_model))
    yield application
    application.container.unwire()


@pytest_asyncio.fixture
async def client(app, users):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as http_client:
        yield http_client
