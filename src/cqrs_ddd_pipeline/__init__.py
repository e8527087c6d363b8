"""cqrs-ddd-pipeline: request pipeline and unit of work for CQRS applications.

Commands and queries flow through an ordered behavior chain (logging,
performance, validation, caching) to their handlers; commands commit through
a Unit of Work that dispatches domain events after a successful commit.
Redis and SQLAlchemy backends live in optional subpackages.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import (
    InMemoryDatabase,
    InMemoryRepository,
    InMemoryUnitOfWork,
)

# ── Behaviors ───────────────────────────────────────────────────
from .behaviors import (
    Behavior,
    BehaviorRegistry,
    CachedValidationBehavior,
    CacheInvalidationBehavior,
    CachingBehavior,
    LoggingBehavior,
    PerformanceBehavior,
    ValidationBehavior,
    configure_pipeline,
)

# ── Caching ─────────────────────────────────────────────────────
from .caching import (
    CacheInvalidator,
    CacheKeyBuilder,
    InMemoryCacheStore,
    ValidationResultCache,
    create_cache_invalidator,
    create_cache_store,
    derive_cache_key,
)
from .config import PipelineSettings
from .correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

# ── CQRS ─────────────────────────────────────────────────────────
from .cqrs import (
    CacheableQuery,
    CacheInvalidatingCommand,
    CancellationToken,
    Command,
    CommandHandler,
    Dispatcher,
    EventDispatcher,
    EventHandler,
    HandlerRegistry,
    Query,
    QueryHandler,
    Request,
    get_current_uow,
)

# ── Domain ───────────────────────────────────────────────────────
from .domain import DomainEvent, EventBuffer, drain_events

# ── Ports ────────────────────────────────────────────────────────
from .ports import (
    IBehavior,
    ICacheStore,
    IEventDispatcher,
    IRepository,
    IValidationResultCache,
    IValidator,
    UnitOfWork,
)

# ── Primitives ───────────────────────────────────────────────────
from .primitives import (
    ConflictError,
    DomainError,
    EntityNotFoundError,
    EventDispatchError,
    HandlerNotFoundError,
    HandlerRegistrationError,
    NotFoundError,
    PipelineConfigurationError,
    PipelineError,
    UnauthorizedError,
    UnitOfWorkError,
    ValidationError,
)

# ── Validation ───────────────────────────────────────────────────
from .validation import (
    PydanticValidator,
    RuleValidator,
    ValidationFailure,
    Validator,
    ValidatorRegistry,
)

__all__ = [
    "Behavior",
    "BehaviorRegistry",
    "CacheInvalidatingCommand",
    "CacheInvalidationBehavior",
    "CacheInvalidator",
    "CacheKeyBuilder",
    "CacheableQuery",
    "CachedValidationBehavior",
    "CachingBehavior",
    "CancellationToken",
    "Command",
    "CommandHandler",
    "ConflictError",
    "Dispatcher",
    "DomainError",
    "DomainEvent",
    "EntityNotFoundError",
    "EventBuffer",
    "EventDispatchError",
    "EventDispatcher",
    "EventHandler",
    "HandlerNotFoundError",
    "HandlerRegistrationError",
    "HandlerRegistry",
    "IBehavior",
    "ICacheStore",
    "IEventDispatcher",
    "IRepository",
    "IValidationResultCache",
    "IValidator",
    "InMemoryCacheStore",
    "InMemoryDatabase",
    "InMemoryRepository",
    "InMemoryUnitOfWork",
    "LoggingBehavior",
    "NotFoundError",
    "PerformanceBehavior",
    "PipelineConfigurationError",
    "PipelineError",
    "PipelineSettings",
    "PydanticValidator",
    "Query",
    "QueryHandler",
    "Request",
    "RuleValidator",
    "UnauthorizedError",
    "UnitOfWork",
    "UnitOfWorkError",
    "ValidationBehavior",
    "ValidationError",
    "ValidationFailure",
    "ValidationResultCache",
    "Validator",
    "ValidatorRegistry",
    "configure_pipeline",
    "correlation_scope",
    "create_cache_invalidator",
    "create_cache_store",
    "derive_cache_key",
    "drain_events",
    "generate_correlation_id",
    "get_correlation_id",
    "get_current_uow",
    "set_correlation_id",
]
