"""Read-only mappings of the tables owned by the auth service.

The auth service issues sessions and stores credentials; this API only looks
up a session by token and reads the user it belongs to. Column names follow
the auth service's schema.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity


AUTH_TABLES = frozenset({"user", "session"})


class User(BaseEntity):
    __tablename__ = "user"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[str] = mapped_column(Text, nullable=False)


class Session(BaseEntity):
    __tablename__ = "session"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    token: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(
        "userId", Text, ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(
        "expiresAt", DateTime(timezone=True), nullable=False
    )
