"""ValidationResultCache: validator outcomes stored in a cache store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..utils import to_seconds
from ..validation.failure import ValidationFailure
from .keys import validation_cache_key, validation_cache_pattern

if TYPE_CHECKING:
    from datetime import timedelta

    from ..cqrs.cancellation import CancellationToken
    from ..ports.cache import ICacheStore

logger = logging.getLogger("cqrs_ddd_pipeline.cache")

DEFAULT_VALIDATION_TTL_SECONDS = 5 * 60


class ValidationResultCache:
    """
    Implementation of
    :class:`~cqrs_ddd_pipeline.ports.validation_cache.IValidationResultCache`
    over any :class:`~cqrs_ddd_pipeline.ports.cache.ICacheStore`.

    Outcomes are stored as lists of plain dicts so they survive JSON
    serialization; an empty list is a cached success.
    """

    def __init__(
        self,
        store: ICacheStore,
        default_ttl: float | timedelta = DEFAULT_VALIDATION_TTL_SECONDS,
    ) -> None:
        self._store = store
        self._default_ttl = to_seconds(default_ttl) or DEFAULT_VALIDATION_TTL_SECONDS

    async def get(
        self,
        request: Any,
        validator_name: str,
        cancellation: CancellationToken | None = None,
    ) -> list[ValidationFailure] | None:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        raw = await self._store.get(validation_cache_key(request, validator_name))
        if raw is None:
            return None
        return [ValidationFailure.from_dict(item) for item in raw]

    async def set(
        self,
        request: Any,
        validator_name: str,
        failures: list[ValidationFailure],
        ttl: float | timedelta | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        await self._store.set(
            validation_cache_key(request, validator_name),
            [f.to_dict() for f in failures],
            ttl if ttl is not None else self._default_ttl,
        )

    async def invalidate_type(self, request_type: type[Any]) -> int:
        removed = await self._store.remove_by_pattern(
            validation_cache_pattern(request_type)
        )
        logger.debug(
            "Invalidated %d validation result(s) for %s",
            removed,
            request_type.__name__,
        )
        return removed

    async def invalidate_all(self) -> int:
        removed = await self._store.remove_by_pattern(validation_cache_pattern())
        logger.debug("Invalidated all validation results (%d)", removed)
        return removed
