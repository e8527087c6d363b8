"""Cache stores, key derivation and cache invalidation."""

from __future__ import annotations

from .factory import create_cache_invalidator, create_cache_store
from .invalidation import CacheInvalidator, CacheKeyBuilder
from .keys import derive_cache_key, validation_cache_key
from .memory import CacheEntry, InMemoryCacheStore
from .validation_cache import ValidationResultCache

__all__ = [
    "CacheEntry",
    "CacheInvalidator",
    "CacheKeyBuilder",
    "InMemoryCacheStore",
    "ValidationResultCache",
    "create_cache_invalidator",
    "create_cache_store",
    "derive_cache_key",
    "validation_cache_key",
]
