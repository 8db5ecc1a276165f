"""Unit tests for backend_common.tasks.BackgroundTaskRunner.

Pure async tests, no database or aiohttp server required.
"""
from __future__ import annotations

import asyncio

import pytest
from aiohttp import web

from backend_common.tasks import BackgroundTaskRunner


@pytest.mark.asyncio
async def test_spawn_runs_task_and_forgets_it():
    runner = BackgroundTaskRunner()

    async def job() -> str:
        await asyncio.sleep(0.01)
        return "done"

    task = runner.spawn(job(), name="job")
    assert runner.pending == 1

    assert await task == "done"
    await asyncio.sleep(0)
    assert runner.pending == 0


@pytest.mark.asyncio
async def test_failed_task_does_not_affect_others():
    runner = BackgroundTaskRunner()
    finished: list[str] = []

    async def bad() -> None:
        raise RuntimeError("boom")

    async def good() -> None:
        await asyncio.sleep(0.01)
        finished.append("good")

    bad_task = runner.spawn(bad(), name="bad")
    runner.spawn(good(), name="good")

    await runner.drain(timeout=1)

    await asyncio.sleep(0)
    assert finished == ["good"]
    assert isinstance(bad_task.exception(), RuntimeError)
    assert runner.pending == 0


@pytest.mark.asyncio
async def test_stop_waits_for_pending_tasks():
    runner = BackgroundTaskRunner(drain_timeout_seconds=1.0)
    finished = asyncio.Event()

    async def job() -> None:
        await asyncio.sleep(0.05)
        finished.set()

    runner.spawn(job(), name="job")
    await runner.stop(web.Application())

    assert finished.is_set()


@pytest.mark.asyncio
async def test_stop_cancels_tasks_past_drain_timeout():
    runner = BackgroundTaskRunner(drain_timeout_seconds=0.05)

    async def hang() -> None:
        await asyncio.sleep(10)

    task = runner.spawn(hang(), name="hang")
    await runner.stop(web.Application())

    assert task.cancelled()
    assert runner.pending == 0


@pytest.mark.asyncio
async def test_spawn_after_stop_is_refused():
    runner = BackgroundTaskRunner()
    await runner.stop()

    async def job() -> None:
        return None

    with pytest.raises(RuntimeError):
        runner.spawn(job(), name="late")
