"""IBehavior: request/response interceptor protocol."""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..cqrs.cancellation import CancellationToken

    NextHandler = Callable[[Any, CancellationToken], Awaitable[Any]]


@runtime_checkable
class IBehavior(Protocol):
    """Protocol for behaviors in the request pipeline.

    A behavior wraps handler invocation and can inspect the request,
    short-circuit execution, or perform side-effects on the way in and on the
    way out. The chain is applied in **LIFO** order (first in the ordered list
    = outermost).

    Optional class attributes understood by
    :class:`~cqrs_ddd_pipeline.behaviors.registry.BehaviorRegistry`:

    ``slot``
        Behaviors sharing a slot are mutually exclusive (``"validation"``).
    ``skips_handler``
        ``True`` when the behavior may return without calling
        ``next_handler`` (caching). Such behaviors must sit inside every
        validation-slot behavior.
    ``applies_to(request_type)``
        Filter used when the chain for a request type is built.
    """

    async def __call__(
        self,
        request: Any,
        next_handler: NextHandler,
        cancellation: CancellationToken,
    ) -> Any:
        """Execute behavior logic and call next_handler to proceed.

        Parameters
        ----------
        request:
            The incoming command or query.
        next_handler:
            Async callable ``(request, cancellation)`` representing the rest
            of the pipeline.
        cancellation:
            Token to forward to every awaited call.

        Returns
        -------
        The response from the handler chain.
        """
        ...
