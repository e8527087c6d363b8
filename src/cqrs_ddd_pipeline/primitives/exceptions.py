"""Domain, application and infrastructure exceptions for cqrs-ddd-pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence


class _Failure(Protocol):
    @property
    def property_path(self) -> str: ...

    @property
    def message(self) -> str: ...


def group_failures(failures: Iterable[_Failure]) -> dict[str, list[str]]:
    """Group failures into ``{property_path: [messages]}``.

    Properties appear in first-seen order and messages keep their order.
    """
    grouped: dict[str, list[str]] = {}
    for failure in failures:
        grouped.setdefault(failure.property_path, []).append(failure.message)
    return grouped


class PipelineError(Exception):
    """Root exception for the entire request pipeline toolkit."""


class DomainError(PipelineError):
    """Base class for all domain-related errors."""


class NotFoundError(DomainError):
    """Raised when a referenced resource does not exist."""


class EntityNotFoundError(NotFoundError):
    """Raised when a specific entity cannot be found by ID."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"Entity '{entity_type}' with key {entity_id!r} was not found.")


class ConflictError(DomainError):
    """Raised when a state precondition is violated (e.g. duplicate email)."""

    def __init__(self, message: str = "Conflict occurred") -> None:
        super().__init__(message)


class UnauthorizedError(DomainError):
    """Raised when the caller lacks the permission for an operation."""

    def __init__(self, message: str = "Unauthorized access") -> None:
        super().__init__(message)


class ValidationError(PipelineError):
    """Raised when request validation fails.

    Carries structured errors: ``{property_path: [messages]}``.
    """

    default_message = "One or more validation failures have occurred."

    def __init__(
        self, errors: Mapping[str, Sequence[str]] | str | None = None
    ) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = {path: list(messages) for path, messages in errors.items()}
        super().__init__(self.default_message)

    @classmethod
    def from_failures(cls, failures: Iterable[_Failure]) -> ValidationError:
        """Group failures by ``property_path``, keeping message order."""
        return cls(group_failures(failures))

    def __str__(self) -> str:
        if not self.errors:
            return self.default_message
        details = "; ".join(
            f"{path}: {message}"
            for path, messages in self.errors.items()
            for message in messages
        )
        return f"{self.default_message} {details}"


class HandlerError(PipelineError):
    """Base class for handler related errors (registration, lookup)."""


class HandlerRegistrationError(HandlerError):
    """Raised when a second handler is registered for the same request type."""


class HandlerNotFoundError(HandlerError):
    """Raised when no handler is registered for a dispatched request type."""

    def __init__(self, request_type: type[object]) -> None:
        self.request_type = request_type
        super().__init__(f"No handler registered for {request_type.__name__}")


class PipelineConfigurationError(PipelineError):
    """Raised when the behavior chain is configured in an unsafe order."""


class InfrastructureError(PipelineError):
    """Base class for all infrastructure-related errors."""


class UnitOfWorkError(InfrastructureError):
    """Raised when a transaction cannot be started, saved or committed."""


class EventDispatchError(InfrastructureError):
    """Raised when one or more domain event handlers failed.

    The dispatcher still delivers every event before raising; the individual
    exceptions are kept on :attr:`errors`.
    """

    def __init__(self, errors: list[BaseException]) -> None:
        self.errors = errors
        first = errors[0] if errors else None
        super().__init__(
            f"{len(errors)} domain event handler(s) failed. First error: {first!r}"
        )
