from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from uptime_monitor.core.config import settings

logger = logging.getLogger(__name__)


class TaskSupervisor:
    """Runs detached coroutines and keeps track of them until shutdown.

    ``spawn`` never waits: callers get control back immediately while the work
    queues behind a concurrency limit. On ``shutdown`` new work is refused and
    in-flight work gets a grace period before being cancelled.
    """

    def __init__(self, concurrency: int | None = None) -> None:
        self._semaphore = asyncio.Semaphore(concurrency or settings.checker_concurrency)
        self._tasks: set[asyncio.Task] = set()
        self._closing = False

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def spawn(self, factory: Callable[[], Awaitable[object]], *, name: str) -> asyncio.Task | None:
        if self._closing:
            logger.warning("supervisor is shutting down, dropping task", extra={"task_name": name})
            return None

        task = asyncio.create_task(self._run_limited(factory), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def _run_limited(self, factory: Callable[[], Awaitable[object]]) -> None:
        async with self._semaphore:
            await factory()

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "detached task failed",
                exc_info=exc,
                extra={"task_name": task.get_name()},
            )

    async def shutdown(self, grace_sec: float | None = None) -> None:
        self._closing = True
        if not self._tasks:
            return

        grace = settings.shutdown_grace_sec if grace_sec is None else grace_sec
        logger.info("waiting for %d in-flight tasks", len(self._tasks))
        _, pending = await asyncio.wait(set(self._tasks), timeout=grace)
        if pending:
            logger.warning("cancelling %d tasks still running after %.1fs", len(pending), grace)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
