"""Token-keyed timers on the asyncio event loop.

Scheduling under a token that already has a pending action replaces it, which
is all the debouncing the watcher and controller need.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]


class Scheduler(Protocol):
    def schedule_after(self, delay: float, token: str, callback: Callback) -> None: ...

    def cancel(self, token: str) -> None: ...

    def pending(self, token: str) -> bool: ...

    async def sleep(self, delay: float) -> None: ...


class AsyncioScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._handles: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule_after(self, delay: float, token: str, callback: Callback) -> None:
        self.cancel(token)
        self._handles[token] = self.loop.call_later(max(0.0, delay), self._fire, token, callback)

    def cancel(self, token: str) -> None:
        handle = self._handles.pop(token, None)
        if handle is not None:
            handle.cancel()

    def pending(self, token: str) -> bool:
        return token in self._handles

    async def sleep(self, delay: float) -> None:
        await asyncio.sleep(delay)

    def _fire(self, token: str, callback: Callback) -> None:
        self._handles.pop(token, None)
        try:
            result = callback()
        except Exception:
            logger.exception("scheduled action %r failed", token)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(lambda t: self._task_done(token, t))

    def _task_done(self, token: str, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("scheduled action %r failed: %s", token, exc, exc_info=exc)
