from __future__ import annotations

"""Utility helpers for scheduling asyncio coroutines from synchronous callbacks."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, Set, Union

CoroutineFactory = Callable[[], Coroutine[Any, Any, Any]]

logger = logging.getLogger(__name__)


def safely_schedule_coroutine(
    coro_or_factory: Union[Coroutine[Any, Any, Any], CoroutineFactory],
) -> Optional[asyncio.Task[Any]]:
    """
    Schedule the provided coroutine on the running loop.

    Accept either a coroutine object or a zero-argument callable that returns a
    coroutine; a factory is only invoked when a loop is running. Without a
    running loop nothing is scheduled and None is returned.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        if asyncio.iscoroutine(coro_or_factory):
            coro_or_factory.close()
        logger.warning("No running event loop; dropping scheduled coroutine")
        return None

    return loop.create_task(_resolve_coroutine(coro_or_factory))


def _resolve_coroutine(
    coro_or_factory: Union[Coroutine[Any, Any, Any], CoroutineFactory],
) -> Coroutine[Any, Any, Any]:
    """Turn the input into a coroutine object for scheduling."""
    if asyncio.iscoroutine(coro_or_factory):
        return coro_or_factory

    if callable(coro_or_factory):
        result = coro_or_factory()
        if not asyncio.iscoroutine(result):
            raise TypeError("Callable passed to safely_schedule_coroutine must return a coroutine")
        return result

    raise TypeError("safely_schedule_coroutine expects a coroutine or a callable returning one")


class BackgroundTasks:
    """Holds references to fire-and-forget tasks until they finish."""

    def __init__(self, name: str):
        self.name = name
        self._tasks: Set[asyncio.Task[Any]] = set()
        self.logger = logging.getLogger(f"{__name__}.{name}")

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro_or_factory: Union[Coroutine[Any, Any, Any], CoroutineFactory]) -> Optional[asyncio.Task[Any]]:
        task = safely_schedule_coroutine(coro_or_factory)
        if task is None:
            return None
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error("Background task failed: %s", exc, exc_info=exc)

    async def wait_idle(self) -> None:
        """Wait until every spawned task, including ones spawned meanwhile, has finished."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()


__all__ = ["BackgroundTasks", "safely_schedule_coroutine"]
