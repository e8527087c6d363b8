"""BehaviorRegistry: declarative registration with safe ordering."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import PipelineConfigurationError
from .base import VALIDATION_SLOT
from .definition import BehaviorDefinition

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..ports.behavior import IBehavior

logger = logging.getLogger(__name__)

# Default priorities (lower = outermost).
LOGGING_PRIORITY = 10
PERFORMANCE_PRIORITY = 20
VALIDATION_PRIORITY = 30
CACHE_INVALIDATION_PRIORITY = 40
CACHING_PRIORITY = 50


class BehaviorRegistry:
    """Collects behavior definitions and produces an ordered list.

    Behaviors are registered with a ``priority``: lower values execute first
    (outermost in the LIFO chain). Equal priorities keep registration order.

    Two configurations are rejected with :class:`PipelineConfigurationError`
    at registration time:

    * two behaviors occupying the same ``slot`` (e.g. ``ValidationBehavior``
      and ``CachedValidationBehavior``);
    * a handler-skipping behavior (``CachingBehavior``) that would run
      outside a validation behavior, letting invalid requests reach the
      cache.
    """

    def __init__(self) -> None:
        self._definitions: list[BehaviorDefinition] = []
        self._instances: list[IBehavior] | None = None  # cache

    # ── Registration ─────────────────────────────────────────────

    def register(
        self,
        behavior_cls: type[Any],
        *,
        priority: int = 0,
        factory: Callable[..., IBehavior] | None = None,
        **kwargs: object,
    ) -> None:
        """Register a behavior class.

        Parameters
        ----------
        behavior_cls:
            The behavior class (must implement
            ``__call__(request, next_handler, cancellation)``).
        priority:
            Lower = outermost in pipe.  Default ``0``.
        factory:
            Optional custom constructor.
        **kwargs:
            Passed to the constructor or factory.
        """
        self._add(
            BehaviorDefinition(
                behavior_cls=behavior_cls,
                priority=priority,
                factory=factory,
                kwargs=kwargs,
            )
        )

    def register_instance(self, behavior: IBehavior, *, priority: int = 0) -> None:
        """Register an already constructed behavior."""
        self._add(
            BehaviorDefinition(
                behavior_cls=type(behavior), priority=priority, instance=behavior
            )
        )

    def add(
        self,
        behavior_cls: type[Any] | None = None,
        *,
        priority: int = 0,
        factory: Callable[..., IBehavior] | None = None,
        **kwargs: object,
    ) -> Any:
        """Decorator-style registration.

        Usage::

            @registry.add
            class AuditBehavior(Behavior): ...

            @registry.add(priority=15)
            class TenantBehavior(Behavior): ...
        """
        if behavior_cls is None:
            # Called as @registry.add(priority=...)
            def wrapper(cls: type[Any]) -> type[Any]:
                self.register(cls, priority=priority, factory=factory, **kwargs)
                return cls

            return wrapper

        # Called as @registry.add
        self.register(behavior_cls, priority=priority, factory=factory, **kwargs)
        return behavior_cls

    def _add(self, defn: BehaviorDefinition) -> None:
        self._check_compatible(defn)
        self._definitions.append(defn)
        self._instances = None  # invalidate cache
        logger.debug("Registered behavior %s (priority=%d)", defn.name, defn.priority)

    def _check_compatible(self, new: BehaviorDefinition) -> None:
        for existing in self._definitions:
            if new.slot is not None and new.slot == existing.slot:
                raise PipelineConfigurationError(
                    f"{new.name} and {existing.name} both occupy the "
                    f"{new.slot!r} slot; register only one of them"
                )
            validation, skipping = _pair(existing, new)
            if validation is not None and skipping is not None:
                if skipping.priority <= validation.priority:
                    raise PipelineConfigurationError(
                        f"{skipping.name} (priority={skipping.priority}) may skip the "
                        f"handler and must run inside {validation.name} "
                        f"(priority={validation.priority})"
                    )

    # ── Retrieval ────────────────────────────────────────────────

    def get_ordered_behaviors(self) -> list[IBehavior]:
        """Return behavior instances sorted by priority (ascending)."""
        if self._instances is None:
            sorted_defs = sorted(self._definitions, key=lambda d: d.priority)
            self._instances = [d.build() for d in sorted_defs]
        return list(self._instances)

    def behaviors_for(self, request_type: type[Any]) -> list[IBehavior]:
        """Ordered behaviors whose ``applies_to`` accepts *request_type*."""
        selected: list[IBehavior] = []
        for behavior in self.get_ordered_behaviors():
            applies_to = getattr(behavior, "applies_to", None)
            if applies_to is None or applies_to(request_type):
                selected.append(behavior)
        return selected

    # ── Cleanup ──────────────────────────────────────────────────

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        self._definitions.clear()
        self._instances = None


def _pair(
    a: BehaviorDefinition, b: BehaviorDefinition
) -> tuple[BehaviorDefinition | None, BehaviorDefinition | None]:
    """Return ``(validation, skipping)`` if the two form such a pair."""
    for validation, skipping in ((a, b), (b, a)):
        if validation.slot == VALIDATION_SLOT and skipping.skips_handler:
            return validation, skipping
    return None, None
