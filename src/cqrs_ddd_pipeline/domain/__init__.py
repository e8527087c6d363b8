"""Domain primitives: events and the entity event buffer."""

from __future__ import annotations

from .entity import EventBuffer, HasDomainEvents, drain_events, event_buffer_of
from .events import DomainEvent, enrich_event_metadata

__all__ = [
    "DomainEvent",
    "EventBuffer",
    "HasDomainEvents",
    "drain_events",
    "enrich_event_metadata",
    "event_buffer_of",
]
