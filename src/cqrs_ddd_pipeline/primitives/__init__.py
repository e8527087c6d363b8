"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    ConflictError,
    DomainError,
    EntityNotFoundError,
    EventDispatchError,
    HandlerError,
    HandlerNotFoundError,
    HandlerRegistrationError,
    InfrastructureError,
    NotFoundError,
    PipelineConfigurationError,
    PipelineError,
    UnauthorizedError,
    UnitOfWorkError,
    ValidationError,
)

__all__ = [
    "ConflictError",
    "DomainError",
    "EntityNotFoundError",
    "EventDispatchError",
    "HandlerError",
    "HandlerNotFoundError",
    "HandlerRegistrationError",
    "InfrastructureError",
    "NotFoundError",
    "PipelineConfigurationError",
    "PipelineError",
    "UnauthorizedError",
    "UnitOfWorkError",
    "ValidationError",
]
