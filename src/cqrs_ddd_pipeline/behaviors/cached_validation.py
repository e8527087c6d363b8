"""CachedValidationBehavior: reuses outcomes of expensive validators."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..caching.validation_cache import DEFAULT_VALIDATION_TTL_SECONDS
from .validation import DEFAULT_SLOW_VALIDATION_MS, ValidationBehavior

if TYPE_CHECKING:
    from datetime import timedelta

    from ..cqrs.cancellation import CancellationToken
    from ..ports.validation import IValidator
    from ..ports.validation_cache import IValidationResultCache
    from ..validation.failure import ValidationFailure
    from ..validation.registry import ValidatorRegistry

logger = logging.getLogger("cqrs_ddd_pipeline.behaviors")


class CachedValidationBehavior(ValidationBehavior):
    """Validation with a result cache for expensive validators.

    For each validator flagged ``expensive`` the result cache is consulted
    first (keyed by request content and validator name): a hit reuses the
    stored failures, a miss runs the validator and stores its outcome,
    success included, for ``ttl``. Cheap validators always run and are
    never cached. Aggregation and the raised error are those of
    :class:`ValidationBehavior`, whose slot this behavior shares.
    """

    def __init__(
        self,
        validators: ValidatorRegistry,
        cache: IValidationResultCache,
        ttl: float | timedelta = DEFAULT_VALIDATION_TTL_SECONDS,
        slow_threshold_ms: float = DEFAULT_SLOW_VALIDATION_MS,
    ) -> None:
        super().__init__(validators, slow_threshold_ms=slow_threshold_ms)
        self._cache = cache
        self._ttl = ttl
        self.hits = 0
        self.misses = 0

    async def _run_one(
        self,
        request: Any,
        validator: IValidator,
        cancellation: CancellationToken,
    ) -> list[ValidationFailure]:
        if not validator.expensive:
            return await super()._run_one(request, validator, cancellation)

        cached = await self._cache.get(request, validator.name, cancellation)
        if cached is not None:
            self.hits += 1
            logger.debug(
                "Validation cache hit: %s on %s", validator.name, type(request).__name__
            )
            return cached

        self.misses += 1
        failures = await super()._run_one(request, validator, cancellation)
        await self._cache.set(request, validator.name, failures, self._ttl, cancellation)
        return failures
