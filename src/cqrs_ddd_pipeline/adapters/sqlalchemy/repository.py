from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func, select

if TYPE_CHECKING:
    import builtins
    from collections.abc import Callable

    from .unit_of_work import SQLAlchemyUnitOfWork

T = TypeVar("T")


class SQLAlchemyRepository(Generic[T]):
    """
    Implementation of ``IRepository[T, Any]`` over the session of a
    :class:`~.unit_of_work.SQLAlchemyUnitOfWork`.

    ``entity_type`` is a mapped class: entities are persisted as they are,
    without a separate model layer. All writes go through the session, so
    nothing reaches the database before the unit of work saves.
    """

    def __init__(self, uow: SQLAlchemyUnitOfWork, entity_type: type[T]) -> None:
        self._uow = uow
        self.entity_type = entity_type

    async def add(self, entity: T) -> None:
        self._uow.session.add(entity)

    async def get(self, entity_id: Any) -> T | None:
        return await self._uow.session.get(self.entity_type, entity_id)

    async def update(self, entity: T) -> None:
        # Persistent instances are tracked already; detached ones are merged.
        session = self._uow.session
        if entity not in session:
            await session.merge(entity)

    async def delete(self, entity: T) -> None:
        await self._uow.session.delete(entity)

    async def list_all(self) -> builtins.list[T]:
        result = await self._uow.session.scalars(select(self.entity_type))
        return list(result.all())

    async def find_first(self, predicate: Callable[[T], Any]) -> T | None:
        for entity in await self.list_all():
            if predicate(entity):
                return entity
        return None

    async def find_by(self, **criteria: Any) -> T | None:
        """First entity whose columns equal *criteria* (filtered in SQL)."""
        stmt = select(self.entity_type).filter_by(**criteria).limit(1)
        result = await self._uow.session.scalars(stmt)
        return result.first()

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self.entity_type)
        return int(await self._uow.session.scalar(stmt) or 0)
