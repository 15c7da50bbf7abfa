"""
Registry of cancellable asyncio tasks tied to one dashboard session.

Both the periodic resync and every settlement delay are registered here so
tearing a session down cancels all of them in one place.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)


class TaskRegistry:
    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def spawn(self, coro: Awaitable, name: Optional[str] = None) -> asyncio.Task:
        if self._closed:
            coro.close()
            raise RuntimeError("TaskRegistry is closed")
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def call_later(
        self,
        delay: float,
        callback: Callable[[], Awaitable],
        name: Optional[str] = None,
    ) -> asyncio.Task:
        """Run ``await callback()`` after *delay* seconds unless cancelled first."""

        async def _delayed():
            await asyncio.sleep(delay)
            await callback()

        return self.spawn(_delayed(), name=name)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Task %s failed", task.get_name(), exc_info=exc)

    async def cancel_all(self) -> None:
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("Cancelled %d outstanding task(s)", len(tasks))
