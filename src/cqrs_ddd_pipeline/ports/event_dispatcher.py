"""IEventDispatcher: where a Unit of Work hands drained domain events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..domain.events import DomainEvent


class SupportsHandle(Protocol):
    def handle(self, event: Any) -> Awaitable[Any] | Any: ...


#: A handler is either an object with ``handle(event)`` or a plain callable.
#: Both may be sync or async.
EventHandler: TypeAlias = Union[SupportsHandle, "Callable[[Any], Any]"]


@runtime_checkable
class IEventDispatcher(Protocol):
    """Receives the events of one successful save or commit, in order."""

    def register(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        ...

    async def dispatch(self, events: list[DomainEvent]) -> None:
        ...

    def clear(self) -> None:
        ...
