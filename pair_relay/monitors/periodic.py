"""Cancellable fixed-interval worker loop."""

from __future__ import annotations

import asyncio
import logging
import contextlib

logger = logging.getLogger(__name__)


class PeriodicWorker:
    name = "periodic"

    def __init__(self, *, interval_s: float) -> None:
        self._interval_s = float(interval_s)
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task | None:
        if self._interval_s <= 0:
            logger.info("%s disabled (interval=%s)", self.name, self._interval_s)
            return None
        if self._task is None:
            self._stop_event.clear()
            self._task = asyncio.create_task(self._loop())
        return self._task

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await self._task
        self._task = None

    async def tick(self) -> None:
        raise NotImplementedError

    async def _loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(self._interval_s)
                if self._stop_event.is_set():
                    break
                try:
                    await self.tick()
                except Exception:
                    logger.exception("%s tick failed", self.name)
        except asyncio.CancelledError:
            return


__all__ = ["PeriodicWorker"]
