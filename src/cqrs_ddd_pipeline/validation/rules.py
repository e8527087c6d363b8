"""Validator base classes and the rule-based validator."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from .failure import ValidationFailure

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..cqrs.cancellation import CancellationToken

R = TypeVar("R")


class Validator(ABC, Generic[R]):
    """Base class for request validators.

    Set ``expensive = True`` on validators that perform I/O so cached
    validation can reuse their outcome.
    """

    expensive: ClassVar[bool] = False

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def validate(
        self, request: R, cancellation: CancellationToken
    ) -> list[ValidationFailure]: ...

    def __repr__(self) -> str:
        return f"{self.name}(expensive={self.expensive})"


@dataclass(frozen=True)
class Rule(Generic[R]):
    property_path: str
    check: Callable[[R], bool | Awaitable[bool]]
    message: str
    when: Callable[[R], bool] | None = None


class RuleValidator(Validator[R]):
    """Declarative validator built from ``rule_for`` calls.

    Every rule is evaluated (no fail-fast), in declaration order. Checks may be
    plain or async callables returning ``True`` when the value is valid.

    Usage::

        class CreateUserValidator(RuleValidator[CreateUserCommand]):
            def __init__(self) -> None:
                super().__init__()
                self.rule_for("Name", lambda c: bool(c.name.strip()), "Name is required.")
                self.rule_for("Email", is_email, "Email must be valid.")
    """

    def __init__(self) -> None:
        self._rules: list[Rule[R]] = []

    @property
    def rules(self) -> tuple[Rule[R], ...]:
        return tuple(self._rules)

    def rule_for(
        self,
        property_path: str,
        check: Callable[[R], bool | Awaitable[bool]],
        message: str,
        *,
        when: Callable[[R], bool] | None = None,
    ) -> RuleValidator[R]:
        """Add a rule; ``when`` limits it to requests where it returns True."""
        self._rules.append(Rule(property_path, check, message, when))
        return self

    async def validate(
        self, request: R, cancellation: CancellationToken
    ) -> list[ValidationFailure]:
        failures: list[ValidationFailure] = []
        for rule in self._rules:
            if rule.when is not None and not rule.when(request):
                continue
            cancellation.raise_if_cancelled()
            outcome: Any = rule.check(request)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if not outcome:
                failures.append(ValidationFailure(rule.property_path, rule.message))
        return failures
