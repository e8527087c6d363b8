"""Redis implementation of the cache store."""

from __future__ import annotations

import asyncio
import json
import logging
import weakref
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter
from pydantic_core import to_json

from ..utils import to_seconds

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import timedelta

    from redis.asyncio import Redis

logger = logging.getLogger("cqrs_ddd_pipeline.redis_cache")

DEFAULT_TTL_SECONDS = 30 * 60


class RedisCacheStore:
    """
    Redis implementation of :class:`~cqrs_ddd_pipeline.ports.cache.ICacheStore`.

    Values are serialized with pydantic's JSON encoder, so models nested in
    lists or dicts survive. Pass ``cls`` on reads (a model or any type
    expression such as ``list[ProductDto]``) to rebuild the value through a
    ``TypeAdapter``; without it the raw JSON is returned. The cache is never a source of
    truth: Redis errors are logged and degrade to misses / no-ops.

    :meth:`get_or_set` serializes factory calls per key inside this process
    and writes with ``SET NX``, so concurrent processes converge on the first
    stored value.
    """

    def __init__(
        self,
        redis_client: Redis[bytes],
        default_ttl: float | timedelta = DEFAULT_TTL_SECONDS,
        scan_count: int = 500,
    ) -> None:
        self._redis = redis_client
        self._default_ttl = to_seconds(default_ttl) or DEFAULT_TTL_SECONDS
        self._scan_count = scan_count
        self._key_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> RedisCacheStore:
        from redis.asyncio import Redis

        return cls(Redis.from_url(url), **kwargs)

    async def get(self, key: str, cls: Any = None) -> Any | None:
        try:
            val = await self._redis.get(key)
            if not val:
                return None
            return self._decode(val, cls)
        except Exception as e:  # noqa: BLE001
            logger.warning("Redis get failed for key %s: %s", key, e)
            return None

    async def set(
        self, key: str, value: Any, ttl: float | timedelta | None = None
    ) -> None:
        try:
            await self._redis.set(key, self._encode(value), px=self._ttl_ms(ttl))
        except Exception as e:  # noqa: BLE001
            logger.warning("Redis set failed for key %s: %s", key, e)

    async def remove(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except Exception as e:  # noqa: BLE001
            logger.warning("Redis delete failed for key %s: %s", key, e)

    async def remove_by_pattern(self, pattern: str) -> int:
        """Caution: This is expensive (SCAN)."""
        removed = 0
        try:
            cursor: int = 0
            while True:
                cursor, keys = await self._redis.scan(
                    cursor, match=pattern, count=self._scan_count
                )
                if keys:
                    removed += await self._redis.delete(*keys)
                if cursor == 0:
                    break
        except Exception as e:  # noqa: BLE001
            logger.warning("Redis remove_by_pattern failed for %s: %s", pattern, e)
        return removed

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._redis.exists(key))
        except Exception as e:  # noqa: BLE001
            logger.warning("Redis exists failed for key %s: %s", key, e)
            return False

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: float | timedelta | None = None,
        cls: Any = None,
    ) -> Any:
        cached = await self.get(key, cls)
        if cached is not None:
            return cached

        lock = self._key_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._key_locks[key] = lock

        async with lock:
            cached = await self.get(key, cls)
            if cached is not None:
                return cached
            value = await factory()
            if value is None:
                return None
            try:
                stored = await self._redis.set(
                    key, self._encode(value), px=self._ttl_ms(ttl), nx=True
                )
            except Exception as e:  # noqa: BLE001
                logger.warning("Redis set failed for key %s: %s", key, e)
                return value
            if not stored:
                # Another process won the race; return its value.
                winner = await self.get(key, cls)
                if winner is not None:
                    return winner
            return value

    # ── Serialization ────────────────────────────────────────────

    @staticmethod
    def _encode(value: Any) -> str:
        # Models nested in lists or dicts serialize as JSON objects too.
        return to_json(value, fallback=str).decode()

    @staticmethod
    def _decode(raw: bytes | str, cls: Any) -> Any:
        if cls is None:
            return json.loads(raw)
        return _adapter_for(cls).validate_json(raw)

    def _ttl_ms(self, ttl: float | timedelta | None) -> int:
        seconds = to_seconds(ttl)
        if seconds is None:
            seconds = self._default_ttl
        return max(1, int(seconds * 1000))


_adapters: dict[Any, TypeAdapter[Any]] = {}


def _adapter_for(response_type: Any) -> TypeAdapter[Any]:
    """``TypeAdapter`` for a response type such as ``list[ProductDto]``."""
    try:
        adapter = _adapters.get(response_type)
    except TypeError:  # unhashable type expression
        return TypeAdapter(response_type)
    if adapter is None:
        adapter = _adapters[response_type] = TypeAdapter(response_type)
    return adapter
