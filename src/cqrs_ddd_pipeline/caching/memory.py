"""In-process cache store with TTL and wildcard invalidation."""

from __future__ import annotations

import asyncio
import fnmatch
import logging
import threading
import time
import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..utils import to_seconds

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import timedelta

logger = logging.getLogger("cqrs_ddd_pipeline.cache")

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass
class CacheEntry:
    """Cached value with its absolute expiry on the store's clock."""

    key: str
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryCacheStore:
    """
    Dictionary-backed implementation of
    :class:`~cqrs_ddd_pipeline.ports.cache.ICacheStore`.

    Safe for concurrent use: a lock guards every map access (so the store may
    also be shared with worker threads) and :meth:`get_or_set` serializes
    factory calls per key. Expiry is checked on every read; expired entries
    are dropped lazily or by :meth:`purge_expired`.

    Values are stored by reference. Cache immutable values (frozen pydantic
    models, tuples, strings) or copies.

    Args:
        default_ttl: TTL for entries stored without one (seconds).
        clock: Monotonic time source; tests inject a fake clock.
    """

    def __init__(
        self,
        default_ttl: float | timedelta = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = to_seconds(default_ttl) or DEFAULT_TTL_SECONDS
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._key_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    # ── ICacheStore ──────────────────────────────────────────────

    async def get(self, key: str, cls: Any = None) -> Any | None:
        return self._lookup(key)

    async def set(
        self, key: str, value: Any, ttl: float | timedelta | None = None
    ) -> None:
        self._store(key, value, ttl)

    async def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def remove_by_pattern(self, pattern: str) -> int:
        with self._lock:
            doomed = [k for k in self._entries if fnmatch.fnmatchcase(k, pattern)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("Removed %d cache entries matching %s", len(doomed), pattern)
        return len(doomed)

    async def exists(self, key: str) -> bool:
        return self._lookup(key) is not None

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: float | timedelta | None = None,
        cls: Any = None,
    ) -> Any:
        value = self._lookup(key)
        if value is not None:
            return value

        lock = self._key_lock(key)
        async with lock:
            # Another caller may have filled the entry while we waited.
            value = self._lookup(key)
            if value is not None:
                return value
            value = await factory()
            if value is not None:
                self._store(key, value, ttl)
            return value

    # ── Maintenance ──────────────────────────────────────────────

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        """Live keys (testing utility)."""
        now = self._clock()
        with self._lock:
            return [k for k, e in self._entries.items() if not e.is_expired(now)]

    def __len__(self) -> int:
        return len(self.keys())

    # ── Internals ────────────────────────────────────────────────

    def _lookup(self, key: str) -> Any | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[key]
                return None
            return entry.value

    def _store(self, key: str, value: Any, ttl: float | timedelta | None) -> None:
        seconds = to_seconds(ttl)
        if seconds is None:
            seconds = self._default_ttl
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + seconds)
        with self._lock:
            self._entries[key] = entry

    def _key_lock(self, key: str) -> asyncio.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._key_locks[key] = lock
            return lock
