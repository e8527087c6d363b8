"""EventDispatcher: local, in-process delivery of domain events."""

from __future__ import annotations

import logging
from inspect import isawaitable
from typing import TYPE_CHECKING

from ..correlation import correlation_scope, get_correlation_id
from ..primitives.exceptions import EventDispatchError

if TYPE_CHECKING:
    from ..domain.events import DomainEvent
    from ..ports.event_dispatcher import EventHandler

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Delivers events to handler instances registered per exact event type.

    Events are delivered one after another in the order given, and the
    handlers of one event in registration order, so subscribers observe the
    same sequence the entities recorded. Each delivery runs with the event's
    correlation id bound.

    A failing handler is logged and delivery continues. Once every event has
    been offered, the collected failures are raised together as
    :class:`EventDispatchError`. Cancellation is never collected.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[type[DomainEvent], list[EventHandler]] = {}

    def register(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        subscribers = self._subscriptions.setdefault(event_type, [])
        if handler not in subscribers:
            subscribers.append(handler)

    def unregister(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        subscribers = self._subscriptions.get(event_type, [])
        if handler in subscribers:
            subscribers.remove(handler)

    async def dispatch(self, events: list[DomainEvent]) -> None:
        failures: list[BaseException] = []
        for event in events:
            subscribers = list(self._subscriptions.get(type(event), ()))
            if not subscribers:
                logger.debug("No handlers for event %s", type(event).__name__)
                continue
            with correlation_scope(event.correlation_id or get_correlation_id()):
                for handler in subscribers:
                    try:
                        await self._deliver(handler, event)
                    except Exception as exc:
                        logger.exception(
                            "Event handler %s failed for %s",
                            _handler_name(handler),
                            type(event).__name__,
                        )
                        failures.append(exc)

        if failures:
            raise EventDispatchError(failures)

    @staticmethod
    async def _deliver(handler: EventHandler, event: DomainEvent) -> None:
        handle = getattr(handler, "handle", None)
        target = handle if callable(handle) else handler
        if not callable(target):
            raise TypeError(f"{handler!r} is neither callable nor has handle()")
        outcome = target(event)
        if isawaitable(outcome):
            await outcome

    def get_registered_handlers(self) -> dict[type[DomainEvent], list[EventHandler]]:
        return {
            event_type: list(subscribers)
            for event_type, subscribers in self._subscriptions.items()
            if subscribers
        }

    def clear(self) -> None:
        self._subscriptions.clear()


def _handler_name(handler: object) -> str:
    return getattr(handler, "__qualname__", type(handler).__name__)
