"""CacheInvalidationBehavior: drops stale cache entries after commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..cqrs.command import CacheInvalidatingCommand
from ..cqrs.dispatcher import get_current_uow
from .base import Behavior

if TYPE_CHECKING:
    from ..cqrs.cancellation import CancellationToken
    from ..ports.behavior import NextHandler
    from ..ports.cache import ICacheStore

logger = logging.getLogger("cqrs_ddd_pipeline.behaviors")

_WILDCARDS = frozenset("*?[")


class CacheInvalidationBehavior(Behavior):
    """Removes ``cache_keys_to_invalidate`` once the command succeeded.

    Inside a Unit of Work the removal is registered as an ``on_commit`` hook,
    so readers cannot repopulate the cache from uncommitted state and a
    rolled-back command invalidates nothing. Entries containing ``*``, ``?``
    or ``[`` are removed as patterns.
    """

    def __init__(self, cache: ICacheStore) -> None:
        self._cache = cache

    def applies_to(self, request_type: type[Any]) -> bool:
        return issubclass(request_type, CacheInvalidatingCommand)

    async def __call__(
        self,
        request: Any,
        next_handler: NextHandler,
        cancellation: CancellationToken,
    ) -> Any:
        result = await next_handler(request, cancellation)
        if not isinstance(request, CacheInvalidatingCommand):
            return result

        keys = list(request.cache_keys_to_invalidate)
        if not keys:
            return result

        async def _invalidate() -> None:
            await self.invalidate(keys)

        uow = get_current_uow()
        if uow is not None:
            uow.on_commit(_invalidate)
        else:
            await _invalidate()
        return result

    async def invalidate(self, keys: list[str]) -> None:
        for key in keys:
            if _WILDCARDS.intersection(key):
                await self._cache.remove_by_pattern(key)
            else:
                await self._cache.remove(key)
        logger.debug("Invalidated cache keys %s", keys)
