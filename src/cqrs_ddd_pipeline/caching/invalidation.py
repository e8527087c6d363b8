"""Entity-oriented cache keys and their invalidation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..ports.cache import ICacheStore

logger = logging.getLogger("cqrs_ddd_pipeline.cache")

SEPARATOR = ":"


class CacheKeyBuilder:
    """Builds ``prefix:entity:…`` keys for entity-level caching.

    Empty parts (e.g. no prefix configured) are skipped, so
    ``CacheKeyBuilder().entity_key("Product", 42) == "Product:42"``.
    """

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def entity_key(self, entity_name: str, entity_id: Any) -> str:
        return self._build(self._prefix, entity_name, str(entity_id))

    def list_key(self, entity_name: str, *params: Any) -> str:
        return self._build(self._prefix, entity_name, "list", *(str(p) for p in params))

    def count_key(self, entity_name: str) -> str:
        return self._build(self._prefix, entity_name, "count")

    def search_pattern(self, entity_name: str) -> str:
        return self._build(self._prefix, entity_name, "search", "*")

    def entity_pattern(self, entity_name: str) -> str:
        return self._build(self._prefix, entity_name, "*")

    def related_keys(self, entity_name: str, entity_id: Any) -> list[str]:
        """Keys (and one pattern) that go stale when one entity changes."""
        return [
            self.entity_key(entity_name, entity_id),
            self.list_key(entity_name),
            self.count_key(entity_name),
            self.search_pattern(entity_name),
        ]

    @staticmethod
    def _build(*parts: str) -> str:
        return SEPARATOR.join(p for p in parts if p and p.strip())


class CacheInvalidator:
    """Removes entity-level cache entries after writes.

    Invalidation is best-effort: store errors are logged, never raised, so a
    cache fault cannot fail a committed business operation.
    """

    def __init__(self, store: ICacheStore, keys: CacheKeyBuilder | None = None) -> None:
        self._store = store
        self._keys = keys or CacheKeyBuilder()

    @property
    def keys(self) -> CacheKeyBuilder:
        return self._keys

    async def invalidate_entity(self, entity_name: str, entity_id: Any) -> None:
        logger.debug("Invalidating cache for %s %r", entity_name, entity_id)
        try:
            exact = [
                k for k in self._keys.related_keys(entity_name, entity_id) if "*" not in k
            ]
            await asyncio.gather(*(self._store.remove(k) for k in exact))
            # Dynamic keys (search results, paged lists).
            await self._store.remove_by_pattern(self._keys.entity_pattern(entity_name))
        except Exception:
            logger.exception(
                "Error invalidating cache for %s %r", entity_name, entity_id
            )

    async def invalidate_entity_type(self, entity_name: str) -> None:
        logger.debug("Invalidating all cache entries for %s", entity_name)
        try:
            await self._store.remove_by_pattern(self._keys.entity_pattern(entity_name))
        except Exception:
            logger.exception("Error invalidating cache for entity type %s", entity_name)

    async def invalidate_many(self, entities: dict[str, list[Any]]) -> None:
        """Invalidate several entities: ``{"Product": [1, 2], "User": [7]}``."""
        await asyncio.gather(
            *(
                self.invalidate_entity(name, entity_id)
                for name, ids in entities.items()
                for entity_id in ids
            )
        )
