"""Base repository shared by the ORM-backed features."""
from abc import ABC
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.shared.entities.base import BaseEntity

T = TypeVar("T", bound=BaseEntity)


class BaseRepository(ABC, Generic[T]):
    """Generic CRUD operations over a single entity type."""

    model: Type[T]

    def __init__(self, session: AsyncSession):
        self.session = session

    def _filtered(self, stmt: Select, **filters: Any) -> Select:
        for field_name, value in filters.items():
            if value is None or not hasattr(self.model, field_name):
                continue
            field = getattr(self.model, field_name)
            if isinstance(value, (list, tuple)):
                stmt = stmt.where(field.in_(value))
            else:
                stmt = stmt.where(field == value)
        return stmt

    def _ordered(self, stmt: Select, order_by: Optional[str]) -> Select:
        if not order_by:
            return stmt
        descending = order_by.startswith("-")
        field_name = order_by[1:] if descending else order_by
        if not hasattr(self.model, field_name):
            return stmt
        field = getattr(self.model, field_name)
        return stmt.order_by(field.desc() if descending else field.asc())

    async def create(self, entity: T) -> T:
        """Persist a new entity and load server-side defaults."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def list(
        self,
        offset: int = 0,
        limit: int = 100,
        order_by: Optional[str] = None,
        **filters: Any,
    ) -> List[T]:
        """List entities with pagination and filters."""
        stmt = self._ordered(self._filtered(select(self.model), **filters), order_by)
        stmt = stmt.offset(offset).limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, entity: T) -> None:
        """Delete an entity through the ORM so relationship cascades apply."""
        await self.session.delete(entity)
        await self.session.flush()
