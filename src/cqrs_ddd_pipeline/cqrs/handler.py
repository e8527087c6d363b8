"""Handler base classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from .cancellation import CancellationToken
    from .command import Command
    from .query import Query

TResult = TypeVar("TResult")  # Result type
E = TypeVar("E")  # Event type


class CommandHandler(ABC, Generic[TResult]):
    """Base class for command handlers.

    Handlers must be registered explicitly with a ``HandlerRegistry``. They
    reach the active Unit of Work through
    :func:`~cqrs_ddd_pipeline.cqrs.dispatcher.get_current_uow` or through
    their constructor.

    Usage::

        class CreateUserHandler(CommandHandler[int]):
            async def handle(
                self, command: CreateUserCommand, cancellation: CancellationToken
            ) -> int:
                ...
    """

    @abstractmethod
    async def handle(
        self, command: Command[TResult], cancellation: CancellationToken
    ) -> TResult:
        """Execute the command and return its result."""
        ...


class QueryHandler(ABC, Generic[TResult]):
    """Base class for query handlers.

    Query handlers never mutate state; cached queries may skip them entirely.

    Usage::

        class GetProductHandler(QueryHandler[ProductDto]):
            async def handle(
                self, query: GetProductQuery, cancellation: CancellationToken
            ) -> ProductDto:
                ...
    """

    @abstractmethod
    async def handle(
        self, query: Query[TResult], cancellation: CancellationToken
    ) -> TResult:
        """Execute the query and return the data."""
        ...


class EventHandler(ABC, Generic[E]):
    """Base class for domain-event handlers.

    Handlers must be registered explicitly with the event dispatcher.

    Usage::

        class UserCreatedHandler(EventHandler[UserCreated]):
            async def handle(self, event: UserCreated) -> None:
                ...
    """

    @abstractmethod
    async def handle(self, event: E) -> Any:
        """React to the domain event."""
        ...
