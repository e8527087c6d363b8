"""Ports: protocols and abstract bases the pipeline plugs into."""

from __future__ import annotations

from .behavior import IBehavior
from .cache import ICacheStore
from .event_dispatcher import EventHandler, IEventDispatcher
from .repository import IRepository
from .unit_of_work import UnitOfWork
from .validation import IValidator
from .validation_cache import IValidationResultCache

__all__ = [
    "EventHandler",
    "IBehavior",
    "ICacheStore",
    "IEventDispatcher",
    "IRepository",
    "IValidationResultCache",
    "IValidator",
    "UnitOfWork",
]
