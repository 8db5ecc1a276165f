"""Detached background tasks for aiohttp services.

Usage::

    from backend_common.tasks import BackgroundTaskRunner

    runner = BackgroundTaskRunner(drain_timeout_seconds=10.0)

    # In a handler, after the request's own work is committed:
    runner.spawn(notify_subscribers(event), name="notify")

    # In create_app():
    app.on_cleanup.append(runner.stop)

Spawned tasks are independent of the request that created them: the request
returns immediately, and a failing task is logged instead of propagating.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Coroutine

import structlog
from aiohttp import web

logger = structlog.get_logger(__name__)


@dataclass
class BackgroundTaskRunner:
    """Tracks fire-and-forget asyncio tasks and drains them on shutdown."""

    drain_timeout_seconds: float = 10.0
    _tasks: set[asyncio.Task[Any]] = field(default_factory=set, init=False, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        """Schedule *coro* as a tracked task. Must be called from a running loop."""
        if self._closed:
            coro.close()
            raise RuntimeError("BackgroundTaskRunner is stopped")
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("background_task cancelled", task=task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "background_task failed",
                task=task.get_name(),
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=exc,
            )

    async def drain(self, timeout: float | None = None) -> int:
        """Wait for pending tasks; cancel whatever is left after *timeout*.

        Returns the number of tasks that had to be cancelled.
        """
        if not self._tasks:
            return 0
        pending_tasks = set(self._tasks)
        _done, still_pending = await asyncio.wait(
            pending_tasks,
            timeout=self.drain_timeout_seconds if timeout is None else timeout,
        )
        for task in still_pending:
            task.cancel()
        if still_pending:
            await asyncio.gather(*still_pending, return_exceptions=True)
        return len(still_pending)

    async def stop(self, _app: web.Application | None = None) -> None:
        """Refuse new work and drain. Register with ``app.on_cleanup``."""
        self._closed = True
        pending = self.pending
        cancelled = await self.drain()
        logger.info("background_tasks drained", pending=pending, cancelled=cancelled)
