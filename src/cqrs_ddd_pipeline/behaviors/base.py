"""Behavior base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from ..cqrs.cancellation import CancellationToken
    from ..ports.behavior import NextHandler

VALIDATION_SLOT = "validation"


class Behavior(ABC):
    """Convenience base for :class:`~cqrs_ddd_pipeline.ports.behavior.IBehavior`.

    Subclasses override :meth:`applies_to` to opt out of request types; the
    dispatcher leaves non-applicable behaviors out of the chain entirely.
    """

    slot: ClassVar[str | None] = None
    skips_handler: ClassVar[bool] = False

    def applies_to(self, request_type: type[Any]) -> bool:
        return True

    @abstractmethod
    async def __call__(
        self,
        request: Any,
        next_handler: NextHandler,
        cancellation: CancellationToken,
    ) -> Any: ...
