"""Unit of Work over a SQLAlchemy ``AsyncSession``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from ...ports.unit_of_work import UnitOfWork
from ...primitives.exceptions import UnitOfWorkError
from .repository import SQLAlchemyRepository

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncSession

    from ...ports.event_dispatcher import IEventDispatcher

    AsyncSessionFactory = Callable[[], AsyncSession]


class SessionManagementError(UnitOfWorkError):
    """Raised when session creation or management fails."""


class SQLAlchemyUnitOfWork(UnitOfWork):
    """Transaction boundary over one ``AsyncSession``.

    Give it either a ``session`` the caller owns, or a ``session_factory``
    (e.g. ``async_sessionmaker(engine, expire_on_commit=False)``); in the
    second case the session is opened on first use and closed when the
    ``async with`` block ends.

    Inside a transaction ``save_changes`` flushes, outside one it commits.
    Events are collected from the session's pending objects, then from its
    identity map; objects without an ``EventBuffer`` contribute nothing.
    """

    def __init__(
        self,
        session: AsyncSession | None = None,
        session_factory: AsyncSessionFactory | None = None,
        event_dispatcher: IEventDispatcher | None = None,
    ) -> None:
        if (session is None) == (session_factory is None):
            raise SessionManagementError(
                "Pass exactly one of session= or session_factory="
            )

        super().__init__(event_dispatcher)
        self._session: AsyncSession | None = session
        self._session_factory = session_factory
        self._owns_session = session_factory is not None

    @property
    def session(self) -> AsyncSession:
        if self._session is not None:
            return self._session
        assert self._session_factory is not None
        try:
            self._session = self._session_factory()
        except Exception as exc:  # noqa: BLE001
            raise SessionManagementError(f"Failed to create session: {exc}") from exc
        return self._session

    # ── UnitOfWork primitives ────────────────────────────────────

    async def _begin(self) -> None:
        try:
            if not self.session.in_transaction():
                await self.session.begin()
        except SQLAlchemyError as e:
            raise UnitOfWorkError(f"Failed to begin transaction: {e}") from e

    async def _flush(self) -> int:
        session = self.session
        count = len(session.new) + len(session.dirty) + len(session.deleted)
        try:
            if self.in_transaction:
                await session.flush()
            else:
                await session.commit()
        except SQLAlchemyError as e:
            raise UnitOfWorkError(f"Failed to save changes: {e}") from e
        return count

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            raise UnitOfWorkError(f"Failed to commit transaction: {e}") from e

    async def _rollback(self) -> None:
        if self._session is None:
            return
        try:
            if self._session.in_transaction():
                await self._session.rollback()
        except SQLAlchemyError as e:
            raise UnitOfWorkError(f"Failed to rollback transaction: {e}") from e

    def tracked_entities(self) -> Iterable[Any]:
        if self._session is None:
            return []
        seen: set[int] = set()
        entities: list[Any] = []
        for obj in [*self._session.new, *self._session.identity_map.values()]:
            if id(obj) not in seen:
                seen.add(id(obj))
                entities.append(obj)
        return entities

    def _create_repository(self, entity_type: type[Any]) -> SQLAlchemyRepository[Any]:
        return SQLAlchemyRepository(self, entity_type)

    # ── Lifecycle ────────────────────────────────────────────────

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Commit or rollback via the base class, closing an owned session."""
        try:
            await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            session, self._session = self._session, None
            try:
                await session.close()
            except Exception as e:  # noqa: BLE001
                raise SessionManagementError(f"Failed to close session: {e}") from e
