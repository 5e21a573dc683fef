"""Cooperative cancellation for in-flight chat requests."""

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Awaitable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EXHAUSTED = object()


class CancellationToken:
    """Shared signal used to stop a running turn early.

    The holder of the token awaits through :meth:`run` and :meth:`iterate`.
    Calling :meth:`cancel` resolves whichever of those is pending instead of
    leaving it hanging on the network. Neither raises on cancellation; the
    caller checks :meth:`is_cancelled` afterwards.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Request cancellation. Safe to call more than once."""
        if not self._event.is_set():
            logger.debug("Cancellation requested")
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until :meth:`cancel` is called."""
        await self._event.wait()

    async def run(self, awaitable: Awaitable[T]) -> T | None:
        """Await ``awaitable`` unless the token is cancelled first.

        Args:
            awaitable: The suspension point to guard.

        Returns:
            The awaited result, or None if cancellation won the race. In the
            latter case the pending awaitable is cancelled.
        """
        if self.is_cancelled():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            return None

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

        if task.cancelled():
            return None
        return task.result()

    async def iterate(self, source: AsyncIterable[T]) -> AsyncIterator[T]:
        """Yield items from ``source`` until it ends or the token is cancelled."""
        iterator = aiter(source)
        while not self.is_cancelled():
            item = await self.run(anext(iterator, _EXHAUSTED))
            if item is _EXHAUSTED or self.is_cancelled():
                return
            yield item
