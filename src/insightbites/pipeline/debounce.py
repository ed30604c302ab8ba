"""Quiet-period debouncer for rapidly changing input."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5


class Debouncer:
    """Propagate only the last pushed value, once input has been quiet for `delay` seconds.

    Every push cancels the pending timer and starts a new one. The callback
    may be a plain function or a coroutine function; once the timer fires
    the callback runs to completion even if another value is pushed.
    """

    def __init__(self, callback: Callable[[Any], Awaitable[None] | None], delay: float = DEBOUNCE_SECONDS):
        self._callback = callback
        self.delay = delay
        self._timer: asyncio.Task | None = None
        self._running: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def push(self, value: Any) -> None:
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._fire(value))

    def cancel(self) -> None:
        """Discard the pending value, if any."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def wait(self) -> None:
        """Wait until the pending value (if any) has propagated."""
        while self.pending or (self._running is not None and not self._running.done()):
            task = self._timer if self.pending else self._running
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    async def _fire(self, value: Any) -> None:
        await asyncio.sleep(self.delay)
        # Detach before calling back so a later push cannot cancel the callback
        self._timer = None
        self._running = asyncio.current_task()
        result = self._callback(value)
        if inspect.isawaitable(result):
            await result
