"""ValidatorRegistry: explicit request type → validators mapping."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import PipelineConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..ports.validation import IValidator

logger = logging.getLogger(__name__)


class ValidatorRegistry:
    """Holds the ordered validator list for each request type.

    Built once at composition time; lookups are by exact request type.
    Validator names must be unique per request type because they are part
    of the validation-cache key.
    """

    def __init__(self) -> None:
        self._validators: dict[type[Any], list[IValidator]] = {}

    # ── Registration ─────────────────────────────────────────────

    def register(self, request_type: type[Any], *validators: IValidator) -> None:
        """Append *validators* to the list for *request_type*."""
        current = self._validators.setdefault(request_type, [])
        for validator in validators:
            if any(v.name == validator.name for v in current):
                raise PipelineConfigurationError(
                    f"Validator {validator.name!r} is already registered "
                    f"for {request_type.__name__}"
                )
            current.append(validator)
            logger.debug(
                "Registered validator %s for %s (expensive=%s)",
                validator.name,
                request_type.__name__,
                validator.expensive,
            )

    def add(self, request_type: type[Any]) -> Callable[[type[Any]], type[Any]]:
        """Decorator-style registration of a validator class.

        Usage::

            @validators.add(CreateUserCommand)
            class CreateUserValidator(RuleValidator[CreateUserCommand]): ...
        """

        def wrapper(cls: type[Any]) -> type[Any]:
            self.register(request_type, cls())
            return cls

        return wrapper

    # ── Retrieval ────────────────────────────────────────────────

    def get_validators(self, request_type: type[Any]) -> list[IValidator]:
        return list(self._validators.get(request_type, ()))

    def registered_types(self) -> list[type[Any]]:
        return list(self._validators)

    # ── Cleanup ──────────────────────────────────────────────────

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        self._validators.clear()
