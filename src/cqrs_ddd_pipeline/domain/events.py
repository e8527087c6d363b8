"""Domain Event base class."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class DomainEvent(BaseModel):
    """Base class for all Domain Events.

    Events are immutable facts recorded by an entity during a state change.
    They are queued on the entity's :class:`~.entity.EventBuffer`, never
    persisted themselves, and dispatched exactly once after the surrounding
    Unit of Work commits.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    aggregate_id: str | None = Field(
        default=None, description="ID of the entity instance this event belongs to"
    )
    aggregate_type: str | None = Field(
        default=None,
        description="Class name of the entity (e.g., 'User', 'Product')",
    )
    correlation_id: str | None = None


def enrich_event_metadata(
    event: DomainEvent,
    *,
    correlation_id: str | None = None,
) -> DomainEvent:
    """Return a copy of *event* with the correlation ID injected.

    If the event already carries a correlation ID the original value is kept.
    """
    if not correlation_id or event.correlation_id:
        return event
    return event.model_copy(update={"correlation_id": correlation_id})
