from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Final, Protocol


class Runnable(Protocol):
    async def run(self, *, limit: int | None = None) -> None: ...


OnError = Callable[[BaseException], None]


class TaskRunner:
    """Start/stop lifecycle for one long-running background coroutine.

    ``start`` schedules ``runnable.run()`` on the running loop; ``stop``
    cancels it and waits for it to unwind. A crash outside of ``stop`` is
    reported through ``on_error``; a crash observed by ``stop`` is re-raised.
    """

    __slots__ = ("_name", "_on_error", "_runnable", "_task")

    def __init__(
        self,
        *,
        runnable: Runnable,
        name: str,
        on_error: OnError | None = None,
    ) -> None:
        self._runnable = runnable
        self._name: Final[str] = name
        self._on_error = on_error
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        task = self._task
        return task is not None and not task.done()

    def start(self) -> None:
        if self._task is not None:
            return
        task = asyncio.create_task(self._runnable.run(), name=self._name)
        task.add_done_callback(self._on_done)
        self._task = task

    async def stop(self) -> None:
        task = self._task
        # Reset first so a concurrent start() does not see a dying task
        self._task = None
        if task is None:
            return
        task.cancel()
        done, _ = await asyncio.wait({task})
        finished = next(iter(done))
        if finished.cancelled():
            return
        exc = finished.exception()
        if exc is not None:
            raise exc

    def _on_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        cb = self._on_error
        if cb is not None:
            cb(exc)


__all__ = ["OnError", "Runnable", "TaskRunner"]
