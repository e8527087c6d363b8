"""Build cache components from :class:`~cqrs_ddd_pipeline.config.PipelineSettings`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import PipelineSettings
from .invalidation import CacheInvalidator, CacheKeyBuilder
from .memory import InMemoryCacheStore

if TYPE_CHECKING:
    from ..ports.cache import ICacheStore


def create_cache_store(settings: PipelineSettings | None = None) -> ICacheStore:
    """
    Redis when ``redis_url`` is configured, otherwise a process-local store.

    The Redis module is imported only when it is actually selected, so the
    ``redis`` extra stays optional.
    """
    settings = settings or PipelineSettings()
    if settings.redis_url:
        from .redis import RedisCacheStore

        return RedisCacheStore.from_url(
            settings.redis_url, default_ttl=settings.default_cache_ttl_seconds
        )
    return InMemoryCacheStore(default_ttl=settings.default_cache_ttl_seconds)


def create_cache_invalidator(
    store: ICacheStore, settings: PipelineSettings | None = None
) -> CacheInvalidator:
    settings = settings or PipelineSettings()
    return CacheInvalidator(store, CacheKeyBuilder(settings.cache_key_prefix))
