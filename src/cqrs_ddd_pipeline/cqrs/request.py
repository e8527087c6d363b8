"""Request base class: the immutable input of one operation."""

from __future__ import annotations

import uuid
from typing import Any, ClassVar, Generic

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import TypeVar

from ..correlation import get_correlation_id

TResult = TypeVar("TResult", default=None)


class Request(BaseModel, Generic[TResult]):
    """Base for commands and queries.

    A request is an immutable value. Its *type identity* (the class name) is
    what the dispatcher routes on and what cache keys are prefixed with.

    ``request_id`` and ``correlation_id`` are per-call metadata: they are
    excluded from :meth:`content`, so two requests with the same field values
    are logically equal for caching purposes even though each call gets a
    fresh ``request_id``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    METADATA_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"request_id", "correlation_id"}
    )

    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    correlation_id: str | None = Field(default_factory=get_correlation_id)

    @classmethod
    def type_name(cls) -> str:
        """Stable type identity used for routing, caching and logging."""
        return cls.__name__

    def content(self) -> dict[str, Any]:
        """JSON-compatible field values without per-call metadata."""
        return self.model_dump(mode="json", exclude=set(self.METADATA_FIELDS))
