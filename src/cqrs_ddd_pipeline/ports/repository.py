"""IRepository: generic repository protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")
ID = TypeVar("ID")


@runtime_checkable
class IRepository(Protocol[T, ID]):
    """
    Generic repository handed out by
    :meth:`UnitOfWork.repository <cqrs_ddd_pipeline.ports.unit_of_work.UnitOfWork.repository>`.

    Repositories only *stage* changes; nothing is written until the owning
    Unit of Work saves. Every entity a repository returns or accepts becomes
    tracked, so its pending domain events are collected on save.
    """

    async def add(self, entity: T) -> None: ...

    async def get(self, entity_id: ID) -> T | None: ...

    async def update(self, entity: T) -> None: ...

    async def delete(self, entity: T) -> None: ...

    async def list_all(self) -> list[T]: ...

    async def find_first(self, predicate: Callable[[T], Any]) -> T | None: ...
