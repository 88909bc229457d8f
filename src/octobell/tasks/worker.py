"""Bounded in-process queues drained by a single background task."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress
from typing import Generic, TypeVar

from ..config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkerClosedError(RuntimeError):
    """The worker is shutting down and no longer accepts items."""


class QueueWorker(Generic[T]):
    """
    Feeds items from a bounded queue to an async handler, one at a time.

    `submit` suspends while the queue is full, so producers feel backpressure.
    Handler exceptions are logged and never stop the loop.
    """

    def __init__(
        self,
        name: str,
        handler: Callable[[T], Awaitable[object]],
        maxsize: int | None = None,
    ):
        self.name = name
        self._handler = handler
        self._queue: asyncio.Queue[T] = asyncio.Queue(maxsize=maxsize or settings.queue_max_size)
        self._task: asyncio.Task[None] | None = None
        self._closing = False

    @property
    def accepting(self) -> bool:
        return not self._closing

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError(f"Worker {self.name} already started")
        self._task = asyncio.create_task(self._run(), name=f"worker:{self.name}")
        logger.info(f"Started worker {self.name}")

    async def submit(self, item: T) -> None:
        """Enqueue an item, waiting for room if the queue is full."""
        if self._closing:
            raise WorkerClosedError(f"Worker {self.name} is shutting down")
        await self._queue.put(item)

    async def stop(self, drain_timeout: float | None = None) -> None:
        """Stop accepting, drain for up to `drain_timeout` seconds, then cancel."""
        self._closing = True
        timeout = drain_timeout if drain_timeout is not None else settings.shutdown_drain_seconds

        if self._task is not None and not self._task.done():
            try:
                await asyncio.wait_for(self._queue.join(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Worker {self.name} abandoning {self._queue.qsize()} pending item(s) "
                    f"after {timeout:g}s"
                )
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
        logger.info(f"Stopped worker {self.name}")

    async def _run(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                await self._handler(item)
            except Exception:
                logger.exception(f"Worker {self.name} failed to process item")
            finally:
                self._queue.task_done()
