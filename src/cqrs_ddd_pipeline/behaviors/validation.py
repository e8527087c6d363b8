"""ValidationBehavior: validates requests before the handler runs."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, ClassVar

from ..primitives.exceptions import ValidationError
from .base import VALIDATION_SLOT, Behavior

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..cqrs.cancellation import CancellationToken
    from ..ports.behavior import NextHandler
    from ..ports.validation import IValidator
    from ..validation.failure import ValidationFailure
    from ..validation.registry import ValidatorRegistry

logger = logging.getLogger("cqrs_ddd_pipeline.behaviors")

DEFAULT_SLOW_VALIDATION_MS = 1000.0


class ValidationBehavior(Behavior):
    """Runs every validator registered for the request type.

    Validators run concurrently; once all have finished, their failures are
    merged in registration order and grouped by property. Any failure raises
    :class:`~cqrs_ddd_pipeline.primitives.exceptions.ValidationError` and the
    rest of the chain (including caching and the handler) never runs. A
    validator raising anything else cancels its siblings and the error
    propagates unchanged. A validation phase slower than ``slow_threshold_ms``
    is logged as a warning.
    """

    slot: ClassVar[str | None] = VALIDATION_SLOT

    def __init__(
        self,
        validators: ValidatorRegistry,
        slow_threshold_ms: float = DEFAULT_SLOW_VALIDATION_MS,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._validators = validators
        self._slow_threshold_ms = slow_threshold_ms
        self._clock = clock

    async def __call__(
        self,
        request: Any,
        next_handler: NextHandler,
        cancellation: CancellationToken,
    ) -> Any:
        validators = self._validators.get_validators(type(request))
        if validators:
            start = self._clock()
            failures = await self._run_all(request, validators, cancellation)
            elapsed_ms = (self._clock() - start) * 1000
            if elapsed_ms > self._slow_threshold_ms:
                logger.warning(
                    "Slow validation: %d validator(s) on %s took %.0fms "
                    "(threshold %.0fms)",
                    len(validators),
                    type(request).__name__,
                    elapsed_ms,
                    self._slow_threshold_ms,
                )
            if failures:
                raise ValidationError.from_failures(failures)
        cancellation.raise_if_cancelled()
        return await next_handler(request, cancellation)

    async def _run_all(
        self,
        request: Any,
        validators: list[IValidator],
        cancellation: CancellationToken,
    ) -> list[ValidationFailure]:
        tasks = [
            asyncio.ensure_future(self._run_one(request, v, cancellation))
            for v in validators
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
        return [failure for result in results for failure in result]

    async def _run_one(
        self,
        request: Any,
        validator: IValidator,
        cancellation: CancellationToken,
    ) -> list[ValidationFailure]:
        cancellation.raise_if_cancelled()
        start = time.perf_counter()
        failures = list(await validator.validate(request, cancellation))
        logger.debug(
            "Validator %s on %s: %d failure(s) in %.2fms",
            validator.name,
            type(request).__name__,
            len(failures),
            (time.perf_counter() - start) * 1000,
        )
        return failures
