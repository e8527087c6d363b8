"""configure_pipeline: the standard behavior chain from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import PipelineSettings
from .cached_validation import CachedValidationBehavior
from .caching import CachingBehavior
from .invalidation import CacheInvalidationBehavior
from .logging import LoggingBehavior
from .performance import PerformanceBehavior
from .registry import (
    CACHE_INVALIDATION_PRIORITY,
    CACHING_PRIORITY,
    LOGGING_PRIORITY,
    PERFORMANCE_PRIORITY,
    VALIDATION_PRIORITY,
    BehaviorRegistry,
)
from .validation import ValidationBehavior

if TYPE_CHECKING:
    from ..ports.cache import ICacheStore
    from ..ports.validation_cache import IValidationResultCache
    from ..validation.registry import ValidatorRegistry


def configure_pipeline(
    settings: PipelineSettings | None = None,
    *,
    validators: ValidatorRegistry | None = None,
    cache: ICacheStore | None = None,
    validation_cache: IValidationResultCache | None = None,
    registry: BehaviorRegistry | None = None,
) -> BehaviorRegistry:
    """Register the standard behaviors, outermost first.

    ``Logging → Performance → (Cached)Validation → CacheInvalidation →
    Caching → handler``. Validation is added when *validators* is given
    (the cached variant when *validation_cache* is given too); the cache
    behaviors are added when *cache* is given.
    """
    settings = settings or PipelineSettings()
    registry = registry or BehaviorRegistry()

    registry.register_instance(LoggingBehavior(), priority=LOGGING_PRIORITY)
    registry.register_instance(
        PerformanceBehavior(threshold_ms=settings.slow_request_threshold_ms),
        priority=PERFORMANCE_PRIORITY,
    )

    if validators is not None:
        if validation_cache is not None:
            registry.register_instance(
                CachedValidationBehavior(
                    validators,
                    validation_cache,
                    ttl=settings.validation_cache_ttl_seconds,
                    slow_threshold_ms=settings.slow_validation_threshold_ms,
                ),
                priority=VALIDATION_PRIORITY,
            )
        else:
            registry.register_instance(
                ValidationBehavior(
                    validators,
                    slow_threshold_ms=settings.slow_validation_threshold_ms,
                ),
                priority=VALIDATION_PRIORITY,
            )

    if cache is not None:
        registry.register_instance(
            CacheInvalidationBehavior(cache), priority=CACHE_INVALIDATION_PRIORITY
        )
        registry.register_instance(
            CachingBehavior(cache, default_ttl=settings.default_cache_ttl_seconds),
            priority=CACHING_PRIORITY,
        )

    return registry
