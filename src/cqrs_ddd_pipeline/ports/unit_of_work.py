"""UnitOfWork: Abstract base class for the Unit of Work pattern."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING, Any

from ..correlation import get_correlation_id
from ..domain.entity import drain_events
from ..domain.events import enrich_event_metadata

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from ..cqrs.cancellation import CancellationToken
    from ..domain.events import DomainEvent
    from .event_dispatcher import IEventDispatcher
    from .repository import IRepository

logger = logging.getLogger("cqrs_ddd_pipeline.uow")


class UnitOfWork(ABC):
    """
    Abstract base class for Unit of Work implementations.

    Subclasses supply the storage primitives (``_begin``, ``_flush``,
    ``_commit``, ``_rollback``, ``tracked_entities`` and
    ``_create_repository``); this class owns the lifecycle guarantees:

    * ``begin_transaction`` is idempotent while a transaction is active.
    * ``commit_transaction`` saves first; any failure rolls back and
      re-raises, so callers never observe a half-committed state.
    * After every successful save, pending domain events are drained from all
      tracked entities (entity order, then queue order). Outside a
      transaction they are dispatched right away; inside one they are held
      until commit succeeds and discarded on rollback.
    * Event-dispatch failures after commit are logged, never rolled back.
    * ``on_commit`` hooks fire **after** the commit and after event dispatch.

    Example:
        ```python
        async with uow:  # begin_transaction
            users = uow.repository(User)
            await users.add(User.create("Ada", "ada@example.com"))
        # commit_transaction on success, rollback_transaction on error
        ```
    """

    def __init__(self, event_dispatcher: IEventDispatcher | None = None) -> None:
        self._event_dispatcher = event_dispatcher
        self._on_commit_hooks: deque[Callable[[], Awaitable[Any]]] = deque()
        self._deferred_events: list[DomainEvent] = []
        self._repositories: dict[type[Any], IRepository[Any, Any]] = {}
        self._transaction_active = False

    @property
    def in_transaction(self) -> bool:
        return self._transaction_active

    @property
    def pending_events(self) -> tuple[DomainEvent, ...]:
        """Events saved inside the active transaction, awaiting commit."""
        return tuple(self._deferred_events)

    # ── Storage primitives ───────────────────────────────────────

    @abstractmethod
    async def _begin(self) -> None:
        """Open the underlying transaction."""

    @abstractmethod
    async def _flush(self) -> int:
        """Write staged changes and return the number of affected entries.

        Outside a transaction the write must be durable on return. The write
        must be all-or-nothing: a raising flush leaves nothing persisted.
        """

    @abstractmethod
    async def _commit(self) -> None:
        """Commit the underlying transaction."""

    @abstractmethod
    async def _rollback(self) -> None:
        """Discard staged changes and roll back any open transaction."""

    @abstractmethod
    def tracked_entities(self) -> Iterable[Any]:
        """Entities loaded or staged through this unit, in tracking order."""

    @abstractmethod
    def _create_repository(self, entity_type: type[Any]) -> IRepository[Any, Any]:
        """Build the repository for *entity_type* bound to this unit."""

    # ── Public contract ──────────────────────────────────────────

    def repository(self, entity_type: type[Any]) -> IRepository[Any, Any]:
        """Return the repository for *entity_type* (one instance per type)."""
        repo = self._repositories.get(entity_type)
        if repo is None:
            repo = self._create_repository(entity_type)
            self._repositories[entity_type] = repo
        return repo

    async def begin_transaction(
        self, cancellation: CancellationToken | None = None
    ) -> None:
        if self._transaction_active:
            logger.debug("Transaction already active on %s", type(self).__name__)
            return
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        await self._begin()
        self._transaction_active = True

    async def save_changes(self, cancellation: CancellationToken | None = None) -> int:
        """Persist staged changes and collect pending domain events.

        Returns the number of written entries. If the write fails, the events
        stay queued on their entities.
        """
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        entities = list(self.tracked_entities())
        count = await self._flush()
        events = drain_events(entities)
        if self._transaction_active:
            self._deferred_events.extend(events)
        else:
            await self._publish(events)
        return count

    async def commit_transaction(
        self, cancellation: CancellationToken | None = None
    ) -> None:
        try:
            await self.save_changes(cancellation)
            if self._transaction_active:
                await self._commit()
        except BaseException:
            try:
                await self.rollback_transaction()
            except Exception:
                logger.exception("Rollback after failed commit also failed")
            raise
        self._transaction_active = False
        events, self._deferred_events = self._deferred_events, []
        await self._publish(events)
        await self.trigger_commit_hooks()

    async def rollback_transaction(self) -> None:
        discarded = len(self._deferred_events) + len(
            drain_events(self.tracked_entities())
        )
        self._deferred_events.clear()
        self._on_commit_hooks.clear()
        if discarded:
            logger.debug("Rollback discarded %d pending domain event(s)", discarded)
        try:
            await self._rollback()
        finally:
            self._transaction_active = False

    # ── Post-commit hooks ────────────────────────────────────────

    def on_commit(self, callback: Callable[[], Awaitable[Any]]) -> None:
        """Register an async callback to be executed after a successful commit.

        Args:
            callback: An async function that takes no arguments.
        """
        self._on_commit_hooks.append(callback)

    async def trigger_commit_hooks(self) -> None:
        """Execute all registered on_commit hooks, in registration order."""
        while self._on_commit_hooks:
            callback = self._on_commit_hooks.popleft()
            try:
                await callback()
            except Exception as exc:
                logger.error("Error in on_commit hook: %s", exc, exc_info=True)

    # ── Event publication ────────────────────────────────────────

    async def _publish(self, events: list[DomainEvent]) -> None:
        if not events:
            return
        if self._event_dispatcher is None:
            logger.debug(
                "No event dispatcher configured; %d event(s) dropped", len(events)
            )
            return
        correlation_id = get_correlation_id()
        enriched = [
            enrich_event_metadata(e, correlation_id=correlation_id) for e in events
        ]
        try:
            await self._event_dispatcher.dispatch(enriched)
        except Exception:
            logger.exception(
                "Dispatch of %d domain event(s) failed after commit", len(enriched)
            )

    # ── Context manager ──────────────────────────────────────────

    async def __aenter__(self) -> UnitOfWork:
        await self.begin_transaction()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """
        Exit the context manager.

        On success commit (which saves, dispatches events, then runs hooks);
        on error roll back and let the exception propagate.
        """
        if exc_type is None:
            await self.commit_transaction()
        else:
            await self.rollback_transaction()
