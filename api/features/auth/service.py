"""Session lookup against the auth service's tables."""
from typing import Mapping, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import cookie_parser

from api.features.auth.dtos import AuthContext
from api.features.auth.entities import Session, User
from api.shared.entities.base import utcnow

logger = structlog.get_logger("chat.auth")


class SessionResolver:
    """Given request headers, return the caller's ``AuthContext`` or ``None``."""

    def __init__(self, cookie_name: str):
        self.cookie_name = cookie_name

    def extract_token(self, headers: Mapping[str, str]) -> Optional[str]:
        """Bearer token first, then the session cookie.

        The cookie holds ``<token>.<signature>``; only the token part is looked up.
        """
        authorization = headers.get("authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

        cookie_value = cookie_parser(headers.get("cookie", "")).get(self.cookie_name)
        if cookie_value:
            token = cookie_value.split(".", 1)[0]
            return token or None
        return None

    async def resolve(
        self, headers: Mapping[str, str], *, db_session: AsyncSession
    ) -> Optional[AuthContext]:
        token = self.extract_token(headers)
        if not token:
            return None

        stmt = (
            select(Session, User)
            .join(User, User.id == Session.user_id)
            .where(Session.token == token, Session.expires_at > utcnow())
        )
        row = (await db_session.execute(stmt)).first()
        if row is None:
            logger.info("session_rejected", reason="unknown_or_expired")
            return None

        session, user = row
        return AuthContext(user_id=user.id, session_id=session.id, email=user.email)
