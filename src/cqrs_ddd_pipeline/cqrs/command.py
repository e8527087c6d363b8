"""Command base classes: immutable intent to change state."""

from __future__ import annotations

from typing import Generic

from typing_extensions import TypeVar

from .request import Request

TResult = TypeVar("TResult", default=None)


class Command(Request[TResult], Generic[TResult]):
    """
    Base for all commands.

    Commands represent write operations that change system state. They:
    - Are named with imperative verbs (e.g., CreateUser, UpdateProductStock)
    - May return a value (e.g., the new entity ID)
    - Run inside a Unit of Work scope opened by the dispatcher

    The ``correlation_id`` is automatically inherited from the current context
    (see :func:`~cqrs_ddd_pipeline.correlation.get_correlation_id`). If no
    correlation ID is active in the context, it defaults to ``None`` and the
    Dispatcher will generate one at dispatch time.
    """


class CacheInvalidatingCommand(Command[TResult], Generic[TResult]):
    """Command that makes cached query results stale.

    Override :attr:`cache_keys_to_invalidate` with exact keys or wildcard
    patterns (``"GetProductQuery_*"``). The
    :class:`~cqrs_ddd_pipeline.behaviors.invalidation.CacheInvalidationBehavior`
    removes them once the command has succeeded.
    """

    @property
    def cache_keys_to_invalidate(self) -> list[str]:
        return []
