"""Conversation entity: a titled container of turns owned by one user."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import IdentifiedEntity


class Conversation(IdentifiedEntity):
    """Conversation owned by exactly one user; only the title ever changes."""

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
