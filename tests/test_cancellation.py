import asyncio

import pytest

from cqrs_ddd_pipeline.cqrs import CancellationToken


def test_new_token_is_not_cancelled() -> None:
    token = CancellationToken()

    assert not token.is_cancelled
    assert token.reason is None
    token.raise_if_cancelled()


def test_cancel_is_idempotent_and_first_reason_wins() -> None:
    token = CancellationToken()

    token.cancel("client disconnected")
    token.cancel("timeout")

    assert token.is_cancelled
    assert token.reason == "client disconnected"


def test_raise_if_cancelled_raises_cancelled_error() -> None:
    token = CancellationToken()
    token.cancel("stop")

    with pytest.raises(asyncio.CancelledError):
        token.raise_if_cancelled()


def test_cancelled_error_is_not_an_exception() -> None:
    # Behaviors catch Exception; cancellation must pass through them.
    assert not issubclass(asyncio.CancelledError, Exception)


@pytest.mark.asyncio()
async def test_wait_returns_after_cancel() -> None:
    token = CancellationToken()

    waiter = asyncio.create_task(token.wait())
    await asyncio.sleep(0)
    assert not waiter.done()

    token.cancel()
    await asyncio.wait_for(waiter, timeout=1)

    assert waiter.done()
