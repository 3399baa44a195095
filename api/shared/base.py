"""Base repository with the CRUD operations shared by feature repositories."""
from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.shared.entities.base import IdentifiedEntity

T = TypeVar("T", bound=IdentifiedEntity)


class BaseRepository(ABC, Generic[T]):
    """Base repository; writes flush but never commit, the caller owns the transaction."""

    model: Type[T]

    def __init__(self, session: AsyncSession):
        self.session = session

    def _where(self, stmt: Select, filters: Dict[str, Any]) -> Select:
        # Equality filters on mapped columns; None matches NULL
        for field_name, value in filters.items():
            if field_name not in self.model.__mapper__.columns:
                raise ValueError(
                    f"{self.model.__name__} has no column '{field_name}' to filter on"
                )
            stmt = stmt.where(getattr(self.model, field_name) == value)
        return stmt

    async def create(self, entity: T) -> T:
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def create_many(self, entities: List[T]) -> List[T]:
        """Insert several rows in one flush, returned in the given order."""
        self.session.add_all(entities)
        await self.session.flush()
        for entity in entities:
            await self.session.refresh(entity)
        return entities

    async def get_by_fields(self, **filters: Any) -> List[T]:
        result = await self.session.execute(self._where(select(self.model), filters))
        return list(result.scalars().all())

    async def update(self, entity: T) -> T:
        """Flush pending attribute changes and reload server-side values."""
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity_id: str) -> bool:
        result = await self.session.execute(
            delete(self.model).where(self.model.id == entity_id)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def list(
        self,
        offset: int = 0,
        limit: int = 100,
        order_by: Optional[str] = None,
        **filters: Any,
    ) -> Tuple[List[T], int]:
        """One page of rows plus the total matching the filters.

        ``order_by`` names a column; a leading ``-`` sorts descending.
        """
        stmt = self._where(select(self.model), filters)
        count_stmt = self._where(select(func.count(self.model.id)), filters)

        if order_by:
            descending = order_by.startswith("-")
            column = getattr(self.model, order_by.lstrip("-"), None)
            if column is not None:
                stmt = stmt.order_by(column.desc() if descending else column.asc())

        result = await self.session.execute(stmt.offset(offset).limit(limit))
        total = (await self.session.execute(count_stmt)).scalar() or 0
        return list(result.scalars().all()), int(total)
