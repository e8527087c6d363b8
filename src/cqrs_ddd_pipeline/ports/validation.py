"""IValidator: per-request-type validation protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..cqrs.cancellation import CancellationToken
    from ..validation.failure import ValidationFailure


@runtime_checkable
class IValidator(Protocol):
    """Protocol for request validators.

    A validator checks one request and reports every problem it finds as a
    :class:`~cqrs_ddd_pipeline.validation.failure.ValidationFailure`. It may
    perform asynchronous checks (database lookups, remote calls); such
    validators should declare ``expensive = True`` so that
    :class:`~cqrs_ddd_pipeline.behaviors.cached_validation.CachedValidationBehavior`
    caches their outcome.
    """

    @property
    def name(self) -> str:
        """Identity used in validation-cache keys and log lines."""
        ...

    @property
    def expensive(self) -> bool:
        """Whether results are worth caching."""
        ...

    async def validate(
        self, request: Any, cancellation: CancellationToken
    ) -> list[ValidationFailure]:
        """Validate *request* and return its failures (empty when valid)."""
        ...
