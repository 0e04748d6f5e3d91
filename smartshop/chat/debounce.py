"""Trailing debounce for coroutine callbacks on an asyncio loop."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


class Debouncer:
    """Collapse calls made within ``wait`` seconds into one trailing call.

    The callback runs with the arguments of the most recent call, as a task
    on the running loop. Must be called from the loop's thread.

    Usage:
        debounced = Debouncer(submit, wait=2.0)
        debounced("milk")
        debounced("milk, eggs")   # only this one fires
        ...
        debounced.close()         # on teardown
    """

    def __init__(self, callback: Callable[..., Awaitable[Any]], wait: float):
        self._callback = callback
        self._wait = wait
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> bool:
        """True while a call is scheduled but has not fired."""
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        if self._closed:
            raise RuntimeError("Debouncer is closed")
        loop = asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self._wait, self._fire, args, kwargs)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def close(self) -> None:
        """Cancel the pending call and refuse new ones.

        Callbacks already running are left to finish.
        """
        self.cancel()
        self._closed = True

    async def wait_idle(self) -> None:
        """Wait until no call is pending and every fired callback finished."""
        while self._handle is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            else:
                await asyncio.sleep(self._wait / 10 or 0.001)

    def _fire(self, args: tuple, kwargs: dict) -> None:
        self._handle = None
        if self._closed:
            return
        task = asyncio.ensure_future(self._callback(*args, **kwargs))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("chat.debounced_call_failed", exc_info=exc)
