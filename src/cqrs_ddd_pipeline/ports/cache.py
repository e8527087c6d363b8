"""ICacheStore - Protocol for cache operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import timedelta


@runtime_checkable
class ICacheStore(Protocol):
    """
    Abstract interface for key-value caches with TTL.

    Implementations are shared between concurrent requests and must be safe
    for concurrent get/set/remove without caller-side locking. An entry is
    never returned after it expired.
    """

    async def get(self, key: str, cls: Any = None) -> Any | None:
        """
        Retrieve a value by key. Returns None if missing or expired.
        If cls is provided (a model or a type expression such as
        ``list[ProductDto]``), serializing stores validate the payload into it.
        """
        ...

    async def set(
        self, key: str, value: Any, ttl: float | timedelta | None = None
    ) -> None:
        """
        Store a value. ``ttl`` in seconds (or timedelta); ``None`` means the
        store's default TTL.
        """
        ...

    async def remove(self, key: str) -> None:
        """Delete a value by key."""
        ...

    async def remove_by_pattern(self, pattern: str) -> int:
        """Delete every key matching a ``*``/``?`` wildcard pattern.

        Returns the number of removed keys.
        """
        ...

    async def exists(self, key: str) -> bool:
        """True if a live (non-expired) entry exists for key."""
        ...

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: float | timedelta | None = None,
        cls: Any = None,
    ) -> Any:
        """
        Return the cached value, or await ``factory`` and cache its result.

        Concurrent callers for the same key observe a single factory call.
        ``None`` results are returned but never cached.
        """
        ...
