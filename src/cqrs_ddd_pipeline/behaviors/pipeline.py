"""build_pipeline: construct the behavior chain."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..cqrs.cancellation import CancellationToken
    from ..ports.behavior import IBehavior

    Handler = Callable[[Any, CancellationToken], Awaitable[Any]]


def build_pipeline(behaviors: list[IBehavior], handler_fn: Handler) -> Handler:
    """Build a LIFO behavior chain ending at *handler_fn*.

    The first behavior in the list is the **outermost** wrapper.
    Each behavior must implement:
    ``async def __call__(request, next_handler, cancellation)``.
    The cancellation token is checked before entering every behavior.
    """
    pipeline: Handler = handler_fn

    for behavior in reversed(behaviors):
        current_next = pipeline  # capture for closure

        async def _wrapper(
            request: Any,
            cancellation: CancellationToken,
            _behavior: IBehavior = behavior,
            _next: Handler = current_next,
        ) -> Any:
            cancellation.raise_if_cancelled()
            return await _behavior(request, _next, cancellation)

        pipeline = _wrapper

    return pipeline
