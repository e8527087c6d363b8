"""CancellationToken: cooperative cancellation handed down the pipeline."""

from __future__ import annotations

import asyncio


class CancellationToken:
    """Signal that the caller no longer wants the response.

    The dispatcher forwards the same token to every behavior, validator,
    cache call and handler. Each of them calls :meth:`raise_if_cancelled`
    before suspending, which raises :class:`asyncio.CancelledError`. The
    error is a ``BaseException``, so ``except Exception`` blocks in
    behaviors never swallow it.

    Usage::

        token = CancellationToken()
        task = asyncio.create_task(dispatcher.dispatch(query, token))
        ...
        token.cancel("client disconnected")
    """

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @classmethod
    def none(cls) -> CancellationToken:
        """A token nobody holds a reference to cancel."""
        return cls()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation. Idempotent; the first reason wins."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise asyncio.CancelledError(self._reason or "operation cancelled")

    async def wait(self) -> None:
        """Block until cancellation is requested."""
        await self._event.wait()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
