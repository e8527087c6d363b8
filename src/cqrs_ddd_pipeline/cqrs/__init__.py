"""CQRS building blocks: requests, handlers, registries and the dispatcher."""

from __future__ import annotations

from .cancellation import CancellationToken
from .command import CacheInvalidatingCommand, Command
from .dispatcher import Dispatcher, get_current_uow
from .event_dispatcher import EventDispatcher
from .handler import CommandHandler, EventHandler, QueryHandler
from .query import CacheableQuery, Query
from .registry import HandlerRegistry
from .request import Request

__all__ = [
    "CacheInvalidatingCommand",
    "CacheableQuery",
    "CancellationToken",
    "Command",
    "CommandHandler",
    "Dispatcher",
    "EventDispatcher",
    "EventHandler",
    "HandlerRegistry",
    "Query",
    "QueryHandler",
    "Request",
    "get_current_uow",
]
