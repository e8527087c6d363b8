"""PerformanceBehavior: warns about slow requests."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from .base import Behavior

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..cqrs.cancellation import CancellationToken
    from ..ports.behavior import NextHandler

logger = logging.getLogger("cqrs_ddd_pipeline.behaviors")

DEFAULT_THRESHOLD_MS = 500.0


class PerformanceBehavior(Behavior):
    """Measures wall-clock time around the rest of the chain.

    Logs a warning when a request takes longer than ``threshold_ms``. The
    response and any exception pass through unchanged.
    """

    def __init__(
        self,
        threshold_ms: float = DEFAULT_THRESHOLD_MS,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._threshold_ms = threshold_ms
        self._clock = clock

    @property
    def threshold_ms(self) -> float:
        return self._threshold_ms

    async def __call__(
        self,
        request: Any,
        next_handler: NextHandler,
        cancellation: CancellationToken,
    ) -> Any:
        start = self._clock()
        try:
            return await next_handler(request, cancellation)
        finally:
            elapsed_ms = (self._clock() - start) * 1000
            if elapsed_ms > self._threshold_ms:
                logger.warning(
                    "Long running request: %s took %.0fms (threshold %.0fms, "
                    "correlation_id=%s)",
                    type(request).__name__,
                    elapsed_ms,
                    self._threshold_ms,
                    getattr(request, "correlation_id", None),
                )
