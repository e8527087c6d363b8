"""LoggingBehavior: logs request execution details."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import DomainError, ValidationError
from .base import Behavior

if TYPE_CHECKING:
    from ..cqrs.cancellation import CancellationToken
    from ..ports.behavior import NextHandler

logger = logging.getLogger("cqrs_ddd_pipeline.behaviors")


class LoggingBehavior(Behavior):
    """Logs request name, duration and correlation_id.

    Failures are classified: validation rejections at INFO, expected domain
    errors (not found, conflict, unauthorized) at WARNING, anything else with
    a traceback. The exception is always re-raised untouched.
    """

    async def __call__(
        self,
        request: Any,
        next_handler: NextHandler,
        cancellation: CancellationToken,
    ) -> Any:
        request_name = type(request).__name__
        correlation_id = getattr(request, "correlation_id", None)
        logger.info(
            "Handling %s (correlation_id=%s)",
            request_name,
            correlation_id,
        )
        start = time.perf_counter()
        try:
            result = await next_handler(request, cancellation)
        except ValidationError as exc:
            elapsed = (time.perf_counter() - start) * 1000
            logger.info(
                "%s rejected by validation after %.2fms: %s",
                request_name,
                elapsed,
                exc.errors,
            )
            raise
        except DomainError as exc:
            elapsed = (time.perf_counter() - start) * 1000
            logger.warning(
                "%s failed after %.2fms: %s: %s",
                request_name,
                elapsed,
                type(exc).__name__,
                exc,
            )
            raise
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.exception("%s failed after %.2fms", request_name, elapsed)
            raise
        elapsed = (time.perf_counter() - start) * 1000
        logger.info("%s completed in %.2fms", request_name, elapsed)
        return result
