from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

logger = logging.getLogger(__name__)


class TaskSlots:
    """
    One restartable unit of work per named category.

    Starting work in a category cancels whatever that category was running.
    A unit of work may only mutate state while it is still the current task of
    its category, which `is_current` checks from inside the task.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def start(self, category: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        self.cancel(category)
        task = asyncio.ensure_future(coro)
        self._tasks[category] = task
        task.add_done_callback(lambda done: self._discard(category, done))
        return task

    async def run(self, category: str, coro: Coroutine[Any, Any, Any]) -> Any:
        """Start work and wait for it; returns None if newer work superseded it."""
        task = self.start(category, coro)
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    def cancel(self, category: str) -> None:
        task = self._tasks.pop(category, None)
        if task is not None and not task.done():
            logger.debug("Cancelling superseded work", extra={"category": category})
            task.cancel()

    def cancel_all(self) -> None:
        for category in list(self._tasks):
            self.cancel(category)

    def is_current(self, category: str) -> bool:
        current = asyncio.current_task()
        return current is not None and self._tasks.get(category) is current

    def is_running(self, category: str) -> bool:
        task = self._tasks.get(category)
        return task is not None and not task.done()

    def _discard(self, category: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(category) is task:
            del self._tasks[category]
