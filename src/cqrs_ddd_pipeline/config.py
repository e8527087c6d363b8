"""Pipeline configuration loaded from ``PIPELINE_*`` environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Tunables for the behavior chain and the cache stores.

    Every value has a safe default, so ``PipelineSettings()`` works without
    any environment. Override with e.g. ``PIPELINE_SLOW_REQUEST_THRESHOLD_MS=1000``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    default_cache_ttl_seconds: float = Field(
        default=30 * 60,
        gt=0,
        description="TTL for cached query responses without an override",
    )
    validation_cache_ttl_seconds: float = Field(
        default=5 * 60,
        gt=0,
        description="TTL for cached results of expensive validators",
    )
    slow_request_threshold_ms: float = Field(
        default=500,
        gt=0,
        description="Requests slower than this are logged as warnings",
    )
    slow_validation_threshold_ms: float = Field(
        default=1000,
        gt=0,
        description="Validation phases slower than this are logged as warnings",
    )
    cache_key_prefix: str = Field(
        default="",
        description="Namespace prepended to entity cache keys",
    )
    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL; in-memory cache is used when unset",
    )
