"""CachingBehavior: cache-aside for cacheable queries."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from ..caching.keys import derive_cache_key
from ..cqrs.query import CacheableQuery
from .base import Behavior

if TYPE_CHECKING:
    from datetime import timedelta

    from ..cqrs.cancellation import CancellationToken
    from ..ports.behavior import NextHandler
    from ..ports.cache import ICacheStore

logger = logging.getLogger("cqrs_ddd_pipeline.behaviors")

DEFAULT_CACHE_TTL_SECONDS = 30 * 60


class CachingBehavior(Behavior):
    """Serves :class:`~cqrs_ddd_pipeline.cqrs.query.CacheableQuery` responses
    from the cache.

    On a hit the handler is skipped entirely. On a miss the rest of the chain
    runs once (concurrent identical misses share one call through
    ``get_or_set``) and a non-``None`` response is stored with the query's
    ``cache_ttl`` or ``default_ttl``.
    """

    skips_handler: ClassVar[bool] = True

    def __init__(
        self,
        cache: ICacheStore,
        default_ttl: float | timedelta = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self._cache = cache
        self._default_ttl = default_ttl

    def applies_to(self, request_type: type[Any]) -> bool:
        return issubclass(request_type, CacheableQuery)

    async def __call__(
        self,
        request: Any,
        next_handler: NextHandler,
        cancellation: CancellationToken,
    ) -> Any:
        if not isinstance(request, CacheableQuery):
            return await next_handler(request, cancellation)

        key = derive_cache_key(request)
        ttl = request.cache_ttl if request.cache_ttl is not None else self._default_ttl
        missed = False

        async def _load() -> Any:
            nonlocal missed
            missed = True
            cancellation.raise_if_cancelled()
            return await next_handler(request, cancellation)

        cancellation.raise_if_cancelled()
        result = await self._cache.get_or_set(
            key, _load, ttl=ttl, cls=request.cache_response_type
        )
        logger.debug("Cache %s for %s", "miss" if missed else "hit", key)
        return result
