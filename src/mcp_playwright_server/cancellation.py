"""
Caller-side cancellation for dispatched operations.

The Dispatcher injects a CancellationToken into any operation parameter
annotated with this type. Operations that only wait on the page (dialogs,
selectors, text) race their wait against the token and report a
"not completed" result instead of failing.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Optional

from .errors import OperationCancelled


class CancellationToken:
    """One-shot cancellation signal shared between a caller and an operation."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled(self.reason or "cancelled")

    def __repr__(self):
        return f"CancellationToken(cancelled={self.cancelled})"


async def run_cancellable(
    awaitable: Awaitable[Any],
    token: Optional[CancellationToken],
    timeout: Optional[float] = None,
) -> Any:
    """
    Await `awaitable` unless the token fires or `timeout` seconds pass first.

    Returns:
        The awaitable's result.

    Raises:
        OperationCancelled: the token was cancelled before completion.
        asyncio.TimeoutError: the timeout elapsed before completion.
        Any exception raised by the awaitable itself.
    """
    if token is not None and token.cancelled:
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        token.raise_if_cancelled()

    task = asyncio.ensure_future(awaitable)
    pending = {task}
    waiter = None
    if token is not None:
        waiter = asyncio.ensure_future(token.wait())
        pending.add(waiter)

    try:
        done, _ = await asyncio.wait(pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        if task in done:
            return task.result()
        if waiter is not None and waiter in done:
            raise OperationCancelled(token.reason or "cancelled")
        raise asyncio.TimeoutError()
    finally:
        leftovers = [f for f in pending if not f.done()]
        for f in leftovers:
            f.cancel()
        if leftovers:
            await asyncio.gather(*leftovers, return_exceptions=True)


__all__ = ["CancellationToken", "run_cancellable"]
