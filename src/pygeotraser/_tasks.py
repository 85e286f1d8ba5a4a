"""Registry for fire-and-forget coroutines.

The event loop only keeps weak references to tasks, so anything spawned
without a caller awaiting it must be held here until it finishes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

_logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Owns tasks that nobody awaits and logs the ones that fail."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        """Schedule *coro* on the running loop and keep it alive until done."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.warning("Background task %s failed", task.get_name(), exc_info=exc)

    async def drain(self, timeout: float | None = None) -> int:
        """Wait for pending tasks, cancel whatever is left after *timeout*.

        Returns the number of tasks that had to be cancelled.
        """
        pending = set(self._tasks)
        if not pending:
            return 0
        if timeout is None or timeout > 0:
            _done, pending = await asyncio.wait(pending, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            _logger.debug("Cancelled %d unfinished background task(s)", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
        return len(pending)
