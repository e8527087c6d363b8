"""Event buffer composed into entities instead of an event-owning base class."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .events import DomainEvent


class EventBuffer:
    """Ordered, append-only queue of pending domain events.

    An entity holds one of these and appends to it from its state-changing
    methods. Only the Unit of Work drains it, after a successful save.

    Usage::

        class User(BaseModel):
            id: int | None = None
            name: str
            _events: EventBuffer = PrivateAttr(default_factory=EventBuffer)

            @property
            def domain_events(self) -> EventBuffer:
                return self._events

            def rename(self, name: str) -> None:
                self.name = name
                self.domain_events.append(UserRenamed(user_id=self.id, name=name))
    """

    __slots__ = ("_events",)

    def __init__(self) -> None:
        self._events: list[DomainEvent] = []

    def append(self, event: DomainEvent) -> None:
        """Record a domain event to be dispatched after commit."""
        self._events.append(event)

    def pending(self) -> tuple[DomainEvent, ...]:
        """Snapshot of the queued events, oldest first."""
        return tuple(self._events)

    def drain(self) -> list[DomainEvent]:
        """Return every queued event and clear the queue in one step."""
        events, self._events = self._events, []
        return events

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __bool__(self) -> bool:
        return bool(self._events)

    def __iter__(self) -> Iterator[DomainEvent]:
        return iter(tuple(self._events))

    def __repr__(self) -> str:
        return f"EventBuffer(pending={len(self._events)})"


@runtime_checkable
class HasDomainEvents(Protocol):
    """Anything that owns an :class:`EventBuffer` under ``domain_events``."""

    @property
    def domain_events(self) -> EventBuffer: ...


def event_buffer_of(entity: Any) -> EventBuffer | None:
    """Return the entity's event buffer, or ``None`` if it does not own one."""
    buffer = getattr(entity, "domain_events", None)
    return buffer if isinstance(buffer, EventBuffer) else None


def drain_events(entities: Iterable[Any]) -> list[DomainEvent]:
    """Collect and clear pending events across *entities*.

    Ordering: entity enumeration order, then per-entity queue order.
    Entities without a buffer are skipped.
    """
    collected: list[DomainEvent] = []
    for entity in entities:
        buffer = event_buffer_of(entity)
        if buffer:
            collected.extend(buffer.drain())
    return collected
