from __future__ import annotations

import asyncio
from typing import Generic, Optional, TypeVar

from loguru import logger

from .types import QueueClosedError, QueueFullError

T = TypeVar("T")


class BoundedQueue(Generic[T]):
    """Bounded FIFO shared by one producer and a pool of workers.

    Enqueue is non-blocking (``try_put``); dequeue blocks until an item arrives
    or the queue is closed and drained. ``in_flight`` counts items enqueued but
    not yet acknowledged with ``task_done``.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")

        self._capacity = capacity
        self._q: asyncio.Queue[T] = asyncio.Queue(maxsize=capacity)
        self._closed = asyncio.Event()
        self._in_flight = 0
        self._peak = 0
        self._enqueued_total = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        return self._q.qsize()

    @property
    def peak_size(self) -> int:
        """Largest size observed right after an enqueue."""
        return self._peak

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def enqueued_total(self) -> int:
        return self._enqueued_total

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def full(self) -> bool:
        return self._q.full()

    def try_put(self, item: T) -> None:
        """Enqueue without waiting. Raises QueueFullError, leaving the queue untouched."""
        if self.closed:
            raise QueueClosedError("BoundedQueue is closed")
        try:
            self._q.put_nowait(item)
        except asyncio.QueueFull:
            raise QueueFullError("BoundedQueue is full") from None
        self._accept()

    async def get(self, timeout: float | None = None) -> T:
        """Next item in FIFO order.

        Raises QueueClosedError once the queue is closed and empty, and
        asyncio.TimeoutError if ``timeout`` elapses first.
        """
        while True:
            if not self._q.empty():
                return self._q.get_nowait()
            if self.closed:
                raise QueueClosedError("BoundedQueue is closed and drained")

            getter = asyncio.ensure_future(self._q.get())
            closer = asyncio.ensure_future(self._closed.wait())
            try:
                done, _ = await asyncio.wait(
                    {getter, closer}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
                )
            except asyncio.CancelledError:
                if getter.done() and not getter.cancelled():
                    self._restore(getter.result())
                raise
            finally:
                closer.cancel()
                # An unfinished getter leaves its item in the queue when cancelled.
                if not getter.done():
                    getter.cancel()

            if getter.done() and not getter.cancelled():
                return getter.result()
            if not done:
                raise asyncio.TimeoutError()

    def task_done(self) -> None:
        self._in_flight -= 1
        self._q.task_done()

    async def join(self) -> None:
        """Wait until every enqueued item has been acknowledged."""
        await self._q.join()

    def close(self) -> None:
        """Reject further enqueues and wake idle consumers."""
        self._closed.set()

    def _restore(self, item: T) -> None:
        # Item was taken off the queue but never handed to the caller
        try:
            self._q.put_nowait(item)
        except asyncio.QueueFull:
            logger.warning(f"Queue refilled while a consumer was cancelled; dropping {item!r}")
            self.task_done()
            return
        self._q.task_done()

    def _accept(self) -> None:
        self._in_flight += 1
        self._enqueued_total += 1
        size = self._q.qsize()
        if size > self._peak:
            self._peak = size
