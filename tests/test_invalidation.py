import logging
from unittest.mock import AsyncMock

import pytest

from cqrs_ddd_pipeline.caching import (
    CacheInvalidator,
    CacheKeyBuilder,
    InMemoryCacheStore,
    create_cache_invalidator,
    create_cache_store,
)
from cqrs_ddd_pipeline.config import PipelineSettings

# --- CacheKeyBuilder ---


def test_keys_without_prefix() -> None:
    keys = CacheKeyBuilder()

    assert keys.entity_key("Product", 42) == "Product:42"
    assert keys.list_key("Product") == "Product:list"
    assert keys.list_key("Product", "page", 2) == "Product:list:page:2"
    assert keys.count_key("Product") == "Product:count"
    assert keys.search_pattern("Product") == "Product:search:*"
    assert keys.entity_pattern("Product") == "Product:*"


def test_keys_with_prefix() -> None:
    keys = CacheKeyBuilder("shop")

    assert keys.prefix == "shop"
    assert keys.entity_key("Product", 42) == "shop:Product:42"
    assert keys.related_keys("Product", 42) == [
        "shop:Product:42",
        "shop:Product:list",
        "shop:Product:count",
        "shop:Product:search:*",
    ]


# --- CacheInvalidator ---


@pytest.fixture
async def store() -> InMemoryCacheStore:
    cache = InMemoryCacheStore()
    for key in (
        "shop:Product:42",
        "shop:Product:43",
        "shop:Product:list",
        "shop:Product:count",
        "shop:Product:search:keyboard",
        "shop:User:1",
    ):
        await cache.set(key, key)
    return cache


@pytest.mark.asyncio()
async def test_invalidate_entity(store: InMemoryCacheStore) -> None:
    invalidator = CacheInvalidator(store, CacheKeyBuilder("shop"))

    await invalidator.invalidate_entity("Product", 42)

    assert store.keys() == ["shop:User:1"]


@pytest.mark.asyncio()
async def test_invalidate_entity_type(store: InMemoryCacheStore) -> None:
    invalidator = CacheInvalidator(store, CacheKeyBuilder("shop"))

    await invalidator.invalidate_entity_type("User")

    assert "shop:User:1" not in store.keys()
    assert len(store) == 5


@pytest.mark.asyncio()
async def test_invalidate_many(store: InMemoryCacheStore) -> None:
    invalidator = CacheInvalidator(store, CacheKeyBuilder("shop"))

    await invalidator.invalidate_many({"Product": [42, 43], "User": [1]})

    assert store.keys() == []


@pytest.mark.asyncio()
async def test_store_errors_are_logged_not_raised(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.ERROR, logger="cqrs_ddd_pipeline.cache")
    broken = AsyncMock()
    broken.remove.side_effect = ConnectionError("cache down")
    invalidator = CacheInvalidator(broken)

    await invalidator.invalidate_entity("Product", 42)

    assert "Error invalidating cache for Product 42" in caplog.text


# --- Factory ---


def test_factory_defaults_to_in_memory_store() -> None:
    settings = PipelineSettings(default_cache_ttl_seconds=60, redis_url=None)

    store = create_cache_store(settings)

    assert isinstance(store, InMemoryCacheStore)
    assert store.default_ttl == 60


@pytest.mark.asyncio()
async def test_factory_invalidator_uses_configured_prefix(
    store: InMemoryCacheStore,
) -> None:
    invalidator = create_cache_invalidator(
        store, PipelineSettings(cache_key_prefix="shop")
    )

    await invalidator.invalidate_entity("Product", 43)

    assert "shop:Product:43" not in store.keys()
    assert "shop:Product:42" in store.keys()
