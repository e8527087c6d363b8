"""InMemoryRepository: repository bound to an in-memory unit of work."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .database import ADD, DELETE, UPDATE

if TYPE_CHECKING:
    import builtins
    from collections.abc import Callable

    from .unit_of_work import InMemoryUnitOfWork

T = TypeVar("T")


class InMemoryRepository(Generic[T]):
    """In-memory implementation of ``IRepository[T, Any]``.

    Writes are staged on the owning unit of work and reach the shared
    :class:`~.database.InMemoryDatabase` only when it saves. Reads see
    committed rows plus rows saved inside the current transaction. Entities
    are keyed by their ``id`` attribute; one left as ``None`` receives the
    next integer id on save.
    """

    def __init__(self, uow: InMemoryUnitOfWork, entity_type: type[T]) -> None:
        self._uow = uow
        self.entity_type = entity_type

    async def add(self, entity: T) -> None:
        self._uow.stage(ADD, entity)

    async def get(self, entity_id: Any) -> T | None:
        entity = self._uow.visible_rows(self.entity_type).get(entity_id)
        if entity is not None:
            self._uow.track(entity)
        return entity

    async def update(self, entity: T) -> None:
        self._uow.stage(UPDATE, entity)

    async def delete(self, entity: T) -> None:
        self._uow.stage(DELETE, entity)

    async def list_all(self) -> builtins.list[T]:
        entities = list(self._uow.visible_rows(self.entity_type).values())
        for entity in entities:
            self._uow.track(entity)
        return entities

    async def find_first(self, predicate: Callable[[T], Any]) -> T | None:
        for entity in self._uow.visible_rows(self.entity_type).values():
            if predicate(entity):
                self._uow.track(entity)
                return entity
        return None

    async def count(self) -> int:
        return len(self._uow.visible_rows(self.entity_type))
