from __future__ import annotations

import asyncio

import pytest
from transcribe_core.task_runner import TaskRunner

from tests.support.fakes import FakeClock, RecordingSleep
from tiktok_transcribe import _test_hooks
from tiktok_transcribe.cache import TranscriptCache
from tiktok_transcribe.sweeper import CacheSweeper


@pytest.mark.asyncio
async def test_run_sleeps_then_sweeps(clock: FakeClock) -> None:
    sleeps = RecordingSleep()
    _test_hooks.sleep = sleeps
    cache = TranscriptCache(retention_seconds=100)
    cache.put("old", "1")
    clock.advance(60)
    cache.put("new", "2")
    clock.advance(50)

    await CacheSweeper(cache, 3600).run(limit=2)

    assert sleeps.delays == [3600.0, 3600.0]
    assert len(cache) == 1
    assert "new" in cache


def test_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        CacheSweeper(TranscriptCache(), 0)


@pytest.mark.asyncio
async def test_task_runner_starts_and_stops_sweeper() -> None:
    runner = TaskRunner(runnable=CacheSweeper(TranscriptCache(), 3600), name="sweeper")
    assert not runner.running
    runner.start()
    await asyncio.sleep(0)
    assert runner.running
    await runner.stop()
    assert not runner.running
