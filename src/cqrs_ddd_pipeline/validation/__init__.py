"""Validation system: failures, rule validators, PydanticValidator, registry."""

from __future__ import annotations

from ..primitives.exceptions import group_failures
from .failure import ValidationFailure
from .pydantic import PydanticValidator
from .registry import ValidatorRegistry
from .rules import Rule, RuleValidator, Validator

__all__ = [
    "PydanticValidator",
    "Rule",
    "RuleValidator",
    "ValidationFailure",
    "Validator",
    "ValidatorRegistry",
    "group_failures",
]
