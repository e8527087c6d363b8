"""IValidationResultCache: stores prior validator outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import timedelta

    from ..cqrs.cancellation import CancellationToken
    from ..validation.failure import ValidationFailure


@runtime_checkable
class IValidationResultCache(Protocol):
    """Cache of validation outcomes keyed by (request content, validator name)."""

    async def get(
        self,
        request: Any,
        validator_name: str,
        cancellation: CancellationToken | None = None,
    ) -> list[ValidationFailure] | None:
        """Return the cached failures, or ``None`` on a miss.

        An empty list is a cached *success*, distinct from a miss.
        """
        ...

    async def set(
        self,
        request: Any,
        validator_name: str,
        failures: list[ValidationFailure],
        ttl: float | timedelta | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None: ...

    async def invalidate_type(self, request_type: type[Any]) -> int:
        """Drop every cached outcome for *request_type*."""
        ...

    async def invalidate_all(self) -> int:
        """Drop every cached validation outcome."""
        ...
