"""Dispatcher: central dispatch point with ContextVar UoW scope."""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, TypeVar

from ..correlation import correlation_scope, generate_correlation_id
from ..primitives.exceptions import HandlerNotFoundError
from .cancellation import CancellationToken
from .command import Command
from .query import Query

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..behaviors.registry import BehaviorRegistry
    from ..ports.unit_of_work import UnitOfWork
    from .registry import HandlerRegistry
    from .request import Request

    Chain = Callable[[Any, CancellationToken], Awaitable[Any]]

logger = logging.getLogger(__name__)

TResult = TypeVar("TResult")

#: ContextVar tracking the current UoW. ``None`` means we are not inside
#: any command scope yet (root command will create a new one).
_current_uow: ContextVar[Any] = ContextVar("current_uow", default=None)


def get_current_uow() -> UnitOfWork | None:
    """Return the active UoW (or *None* if outside a command scope)."""
    return _current_uow.get()


class Dispatcher:
    """Routes commands / queries through the behavior chain to their handlers.

    The chain for a request type (applicable behaviors + handler class) is
    resolved on first dispatch and cached; later calls only instantiate the
    handler and run the chain. No other state is kept between calls, so one
    dispatcher serves any number of concurrent requests.

    **UoW scope detection:** uses :data:`_current_uow` to decide whether
    an incoming command is a *root* command (opens a fresh UoW that commits on
    success and rolls back on error) or a *nested* command (reuses the parent
    UoW). Queries never open a UoW.

    Parameters
    ----------
    registry:
        :class:`~cqrs_ddd_pipeline.cqrs.registry.HandlerRegistry` instance.
    behaviors:
        Optional :class:`~cqrs_ddd_pipeline.behaviors.registry.BehaviorRegistry`.
    uow_factory:
        Optional callable returning a fresh
        :class:`~cqrs_ddd_pipeline.ports.unit_of_work.UnitOfWork`.
    handler_factory:
        Optional callable ``(handler_cls) -> handler_instance``.
        Defaults to simple ``handler_cls()`` construction.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        *,
        behaviors: BehaviorRegistry | None = None,
        uow_factory: Callable[[], UnitOfWork] | None = None,
        handler_factory: Callable[[type[Any]], Any] | None = None,
    ) -> None:
        self._registry = registry
        self._behaviors = behaviors
        self._uow_factory = uow_factory
        self._handler_factory: Callable[[type[Any]], Any] = handler_factory or (
            lambda cls: cls()
        )
        self._chains: dict[type[Any], Chain] = {}

    # ── Public API ───────────────────────────────────────────────

    async def dispatch(
        self,
        request: Request[TResult],
        cancellation: CancellationToken | None = None,
    ) -> TResult:
        """Run *request* through its behavior chain and return the response."""
        token = cancellation if cancellation is not None else CancellationToken.none()
        token.raise_if_cancelled()

        if not request.correlation_id:
            request = request.model_copy(
                update={"correlation_id": generate_correlation_id()}
            )

        chain = self._chain_for(type(request))

        with correlation_scope(request.correlation_id):
            if (
                isinstance(request, Command)
                and self._uow_factory is not None
                and _current_uow.get() is None
            ):
                result: TResult = await self._dispatch_in_uow(chain, request, token)
                return result
            result = await chain(request, token)
            return result

    async def send(
        self,
        command: Command[TResult],
        cancellation: CancellationToken | None = None,
    ) -> TResult:
        """Dispatch a *command*.

        Root commands open a new UoW and commit/rollback automatically.
        Nested commands reuse the existing UoW (no double-commit).
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(command).__name__} is not a Command")
        return await self.dispatch(command, cancellation)

    async def query(
        self,
        query: Query[TResult],
        cancellation: CancellationToken | None = None,
    ) -> TResult:
        """Dispatch a *query* (never opens a UoW)."""
        if not isinstance(query, Query):
            raise TypeError(f"{type(query).__name__} is not a Query")
        return await self.dispatch(query, cancellation)

    # ── Internals ────────────────────────────────────────────────

    async def _dispatch_in_uow(
        self, chain: Chain, command: Any, cancellation: CancellationToken
    ) -> Any:
        assert self._uow_factory is not None
        async with self._uow_factory() as uow:
            token = _current_uow.set(uow)
            try:
                return await chain(command, cancellation)
            finally:
                _current_uow.reset(token)

    def _chain_for(self, request_type: type[Any]) -> Chain:
        chain = self._chains.get(request_type)
        if chain is None:
            chain = self._build_chain(request_type)
            self._chains[request_type] = chain
        return chain

    def _build_chain(self, request_type: type[Any]) -> Chain:
        handler_cls = self._registry.get_handler(request_type)
        if handler_cls is None:
            raise HandlerNotFoundError(request_type)

        factory = self._handler_factory

        async def _innermost(request: Any, cancellation: CancellationToken) -> Any:
            cancellation.raise_if_cancelled()
            handler = factory(handler_cls)
            return await handler.handle(request, cancellation)

        if self._behaviors is None:
            return _innermost

        from ..behaviors.pipeline import build_pipeline

        behaviors = self._behaviors.behaviors_for(request_type)
        logger.debug(
            "Built chain for %s: %s -> %s",
            request_type.__name__,
            [type(b).__name__ for b in behaviors],
            handler_cls.__name__,
        )
        return build_pipeline(behaviors, _innermost)

    def reset(self) -> None:
        """Forget cached chains (after re-configuring registries in tests)."""
        self._chains.clear()


__all__ = ["Dispatcher", "get_current_uow"]
