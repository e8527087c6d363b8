"""HandlerRegistry: request type to handler class, resolved once per type."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import HandlerRegistrationError
from .command import Command
from .query import Query

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..ports.event_dispatcher import IEventDispatcher

logger = logging.getLogger(__name__)


def _kind_of(request_type: type[Any]) -> str:
    if issubclass(request_type, Command):
        return "command"
    if issubclass(request_type, Query):
        return "query"
    raise HandlerRegistrationError(
        f"{request_type.__name__} is neither a Command nor a Query"
    )


class HandlerRegistry:
    """Handler classes registered at startup, looked up by exact type.

    Each command or query type has exactly one handler; registering a
    different class for a type that is already taken raises
    :class:`HandlerRegistrationError`, while repeating the same pair is a
    no-op. Event types may have any number of handler classes, kept in
    registration order.
    """

    def __init__(self) -> None:
        self._requests: dict[type[Any], type[Any]] = {}
        self._events: dict[type[Any], list[type[Any]]] = {}

    def register(self, request_type: type[Any], handler_cls: type[Any]) -> None:
        kind = _kind_of(request_type)
        current = self._requests.get(request_type)
        if current is handler_cls:
            return
        if current is not None:
            raise HandlerRegistrationError(
                f"Duplicate {kind} handler for {request_type.__name__}: "
                f"{current.__name__} is registered, {handler_cls.__name__} rejected"
            )
        self._requests[request_type] = handler_cls
        logger.debug(
            "Registered %s handler %s for %s",
            kind,
            handler_cls.__name__,
            request_type.__name__,
        )

    def register_event_handler(
        self, event_type: type[Any], handler_cls: type[Any]
    ) -> None:
        classes = self._events.setdefault(event_type, [])
        if handler_cls not in classes:
            classes.append(handler_cls)

    def get_handler(self, request_type: type[Any]) -> type[Any] | None:
        return self._requests.get(request_type)

    def get_command_handler(self, command_type: type[Any]) -> type[Any] | None:
        if not issubclass(command_type, Command):
            return None
        return self._requests.get(command_type)

    def get_query_handler(self, query_type: type[Any]) -> type[Any] | None:
        if not issubclass(query_type, Query):
            return None
        return self._requests.get(query_type)

    def get_event_handlers(self, event_type: type[Any]) -> list[type[Any]]:
        return list(self._events.get(event_type, ()))

    def get_all_event_handlers(self) -> dict[type[Any], list[type[Any]]]:
        return {event_type: list(cls) for event_type, cls in self._events.items()}

    def subscribe(
        self,
        event_dispatcher: IEventDispatcher,
        handler_factory: Callable[[type[Any]], Any] | None = None,
    ) -> None:
        """Instantiate every event handler class and register it for delivery."""
        build = handler_factory or (lambda cls: cls())
        for event_type, classes in self._events.items():
            for handler_cls in classes:
                event_dispatcher.register(event_type, build(handler_cls))

    def get_registered_handlers(self) -> dict[str, Any]:
        """Names only, for diagnostics."""
        commands: dict[str, str] = {}
        queries: dict[str, str] = {}
        for request_type, handler_cls in self._requests.items():
            target = commands if issubclass(request_type, Command) else queries
            target[request_type.__name__] = handler_cls.__name__
        return {
            "commands": commands,
            "queries": queries,
            "events": {
                event_type.__name__: [h.__name__ for h in classes]
                for event_type, classes in self._events.items()
            },
        }

    def clear(self) -> None:
        self._requests.clear()
        self._events.clear()
