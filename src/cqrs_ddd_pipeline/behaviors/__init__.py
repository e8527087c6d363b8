"""Behaviors: cross-cutting interceptors around handler execution."""

from __future__ import annotations

from .base import VALIDATION_SLOT, Behavior
from .cached_validation import CachedValidationBehavior
from .caching import CachingBehavior
from .definition import BehaviorDefinition
from .invalidation import CacheInvalidationBehavior
from .logging import LoggingBehavior
from .performance import PerformanceBehavior
from .pipeline import build_pipeline
from .registry import BehaviorRegistry
from .setup import configure_pipeline
from .validation import ValidationBehavior

__all__ = [
    "VALIDATION_SLOT",
    "Behavior",
    "BehaviorDefinition",
    "BehaviorRegistry",
    "CacheInvalidationBehavior",
    "CachedValidationBehavior",
    "CachingBehavior",
    "LoggingBehavior",
    "PerformanceBehavior",
    "ValidationBehavior",
    "build_pipeline",
    "configure_pipeline",
]
