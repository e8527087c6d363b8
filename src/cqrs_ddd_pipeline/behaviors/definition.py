"""BehaviorDefinition: descriptor for a behavior in the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..ports.behavior import IBehavior


def _empty_kwargs() -> dict[str, object]:
    return {}


@dataclass
class BehaviorDefinition:
    """Descriptor for a behavior in the pipeline.

    Supports **deferred instantiation**: supply *behavior_cls* and optional
    *factory* / *kwargs* for lazy construction, or a ready *instance*.
    """

    behavior_cls: type[Any]
    priority: int = 0
    factory: Callable[..., IBehavior] | None = None
    kwargs: dict[str, object] = field(default_factory=_empty_kwargs)
    instance: IBehavior | None = None

    @property
    def slot(self) -> str | None:
        return getattr(self.behavior_cls, "slot", None)

    @property
    def skips_handler(self) -> bool:
        return bool(getattr(self.behavior_cls, "skips_handler", False))

    @property
    def name(self) -> str:
        return self.behavior_cls.__name__

    def build(self) -> IBehavior:
        """Construct (or return) the behavior instance."""
        if self.instance is not None:
            return self.instance
        if self.factory is not None:
            return self.factory(**self.kwargs)
        behavior: IBehavior = self.behavior_cls(**self.kwargs)
        return behavior
