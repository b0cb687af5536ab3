"""Cooperative scheduling on the asyncio event loop.

Every callback here runs on the loop thread, so state mutations are atomic
between awaits. Frame callbacks are plain functions: they must not block and
must not await I/O.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class FrameLoop:
    """Calls ``on_frame(now)`` once per tick until stopped."""

    def __init__(
        self,
        on_frame: Callable[[float], None],
        clock: Callable[[], float],
        fps: float = 60.0,
    ) -> None:
        self._on_frame = on_frame
        self._clock = clock
        self._interval = 1.0 / fps if fps > 0 else 0.0
        self._task: asyncio.Task | None = None
        self.frames = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="mural-frame-loop")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            try:
                self._on_frame(self._clock())
            except Exception:
                # A broken frame must not kill the loop
                logger.exception("Frame callback failed")
            self.frames += 1
            await asyncio.sleep(self._interval)


class PeriodicTask:
    """Runs ``job()`` every ``interval`` seconds; failures wait for the next tick."""

    def __init__(self, job: Callable[[], Awaitable[None]], interval: float, name: str) -> None:
        self._job = job
        self._interval = interval
        self.name = name
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._job()
            except Exception as e:
                logger.debug("%s failed: %s", self.name, e)
