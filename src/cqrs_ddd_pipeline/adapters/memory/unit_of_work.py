"""InMemoryUnitOfWork: transactional fake over an InMemoryDatabase."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...ports.unit_of_work import UnitOfWork
from .database import ADD, DELETE, InMemoryDatabase, Write
from .repository import InMemoryRepository

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ...ports.event_dispatcher import IEventDispatcher


class InMemoryUnitOfWork(UnitOfWork):
    """In-memory implementation of UnitOfWork.

    Changes staged through repositories are written on save: directly to the
    database outside a transaction, or into a transaction buffer that commit
    applies atomically and rollback throws away. Records commit/rollback
    calls for assertions and can be told to fail the next save.
    """

    def __init__(
        self,
        database: InMemoryDatabase | None = None,
        event_dispatcher: IEventDispatcher | None = None,
    ) -> None:
        super().__init__(event_dispatcher)
        self.database = database if database is not None else InMemoryDatabase()
        self._staged: list[tuple[str, Any]] = []
        self._transaction_writes: list[Write] = []
        self._tracked: dict[int, Any] = {}
        self._fail_next_save: BaseException | None = None
        self.commit_count: int = 0
        self.rollback_count: int = 0
        self.save_count: int = 0

    # ── Staging (used by repositories) ───────────────────────────

    def stage(self, op: str, entity: Any) -> None:
        self._staged.append((op, entity))
        self.track(entity)

    def track(self, entity: Any) -> None:
        self._tracked.setdefault(id(entity), entity)

    def visible_rows(self, entity_type: type[Any]) -> dict[Any, Any]:
        rows = self.database.rows(entity_type)
        for op, write_type, entity_id, entity in self._transaction_writes:
            if write_type is not entity_type:
                continue
            if op == DELETE:
                rows.pop(entity_id, None)
            else:
                rows[entity_id] = entity
        return rows

    # ── UnitOfWork primitives ────────────────────────────────────

    async def _begin(self) -> None:
        self._transaction_writes = []

    async def _flush(self) -> int:
        if self._fail_next_save is not None:
            error, self._fail_next_save = self._fail_next_save, None
            raise error

        writes: list[Write] = []
        for op, entity in self._staged:
            entity_type = type(entity)
            if op == ADD and getattr(entity, "id", None) is None:
                entity.id = self.database.next_id(entity_type)
            writes.append((op, entity_type, entity.id, entity))

        if self.in_transaction:
            self._transaction_writes.extend(writes)
        else:
            self.database.apply(writes)
        self._staged.clear()
        self.save_count += 1
        return len(writes)

    async def _commit(self) -> None:
        self.database.apply(self._transaction_writes)
        self._transaction_writes = []
        self.commit_count += 1

    async def _rollback(self) -> None:
        self._staged.clear()
        self._transaction_writes = []
        self._tracked.clear()
        self.rollback_count += 1

    def tracked_entities(self) -> Iterable[Any]:
        return list(self._tracked.values())

    def _create_repository(self, entity_type: type[Any]) -> InMemoryRepository[Any]:
        return InMemoryRepository(self, entity_type)

    # ── Test helpers ─────────────────────────────────────────────

    def fail_next_save(self, error: BaseException) -> None:
        """Make the next save raise *error* before writing anything."""
        self._fail_next_save = error


def in_memory_unit_of_work_factory(
    database: InMemoryDatabase,
    event_dispatcher: IEventDispatcher | None = None,
) -> Callable[[], InMemoryUnitOfWork]:
    """Return a zero-argument factory for the dispatcher's ``uow_factory``."""

    def factory() -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(database, event_dispatcher)

    return factory
