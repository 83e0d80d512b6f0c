"""
Producer side of the crawl pipeline.

The producer walks the item sequence once and offers each item to the
bounded queue without blocking. When the queue rejects an item the producer
switches to overflow mode: the item goes into a local FIFO buffer that is
drained front-first, sleeping a RetryPolicy interval after every rejected
attempt. Later source items wait until the buffer is empty, so enqueue order
always equals source order.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Deque, Generic, Iterable, Optional, TypeVar

from loguru import logger

from ..metrics.registry import (
    ENQUEUE_RETRY_WAITS_TOTAL,
    ITEMS_ENQUEUED_TOTAL,
    OVERFLOW_EVENTS_TOTAL,
)
from .feedback import BackpressureLevel, FeedbackBus, FeedbackEvent
from .policy import RetryPolicy
from .queue import BoundedQueue
from .types import QueueFullError

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class OverflowBuffer(Generic[T]):
    """FIFO of items the queue has rejected.

    An item leaves only through ``drain_into`` after it has been placed on
    the queue.
    """

    def __init__(self) -> None:
        self._items: Deque[T] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def push(self, item: T) -> None:
        self._items.append(item)

    def front(self) -> T:
        return self._items[0]

    async def drain_into(
        self,
        queue: BoundedQueue[T],
        policy: RetryPolicy,
        *,
        sleep: Sleep = asyncio.sleep,
        on_enqueued: Optional[Callable[[T], None]] = None,
        on_wait: Optional[Callable[[T, int, float], None]] = None,
    ) -> int:
        """Re-enqueue every buffered item in order. Returns the number of waits taken."""
        waits = 0
        attempt = 0
        while self._items:
            item = self._items[0]
            try:
                queue.try_put(item)
            except QueueFullError:
                attempt += 1
                waits += 1
                delay = policy.next_backoff_sec(attempt)
                if on_wait:
                    on_wait(item, attempt, delay)
                await sleep(delay)
                continue
            self._items.popleft()
            attempt = 0
            if on_enqueued:
                on_enqueued(item)
        return waits


@dataclass
class ProducerStats:
    produced: int = 0
    enqueued: int = 0
    overflow_events: int = 0
    retry_waits: int = 0


class Producer(Generic[T]):
    """Feeds a BoundedQueue from an iterable of work items.

    Usage:

        producer = Producer(queue, source.produce(), RetryPolicy.fixed(1000))
        stats = await producer.run()
    """

    def __init__(
        self,
        queue: BoundedQueue[T],
        items: Iterable[T],
        retry_policy: Optional[RetryPolicy] = None,
        *,
        coord_id: str = "crawl",
        feedback: Optional[FeedbackBus] = None,
        sleep: Sleep = asyncio.sleep,
        describe: Callable[[T], str] = repr,
    ):
        self._queue = queue
        self._items = items
        self._policy = retry_policy or RetryPolicy()
        self._coord_id = coord_id
        self._feedback = feedback
        self._sleep = sleep
        self._describe = describe
        self._buffer: OverflowBuffer[T] = OverflowBuffer()
        self.stats = ProducerStats()
        self._done = False

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    @property
    def done(self) -> bool:
        return self._done

    async def run(self) -> ProducerStats:
        try:
            for item in self._items:
                self.stats.produced += 1
                try:
                    self._queue.try_put(item)
                except QueueFullError:
                    await self._overflow(item)
                    continue
                self._enqueued(item)
        finally:
            self._done = True
        logger.info(
            f"Producer finished: produced={self.stats.produced} enqueued={self.stats.enqueued} "
            f"overflow_events={self.stats.overflow_events} retry_waits={self.stats.retry_waits}"
        )
        return self.stats

    async def _overflow(self, item: T) -> None:
        self.stats.overflow_events += 1
        OVERFLOW_EVENTS_TOTAL.labels(coord_id=self._coord_id).inc()
        self._buffer.push(item)
        logger.info(
            f"Queue is full ({self._queue.size}/{self._queue.capacity}). "
            f"Buffering {self._describe(item)} until a slot frees up"
        )
        await self._publish(BackpressureLevel.SATURATED, "queue_full")

        self.stats.retry_waits += await self._buffer.drain_into(
            self._queue,
            self._policy,
            sleep=self._sleep,
            on_enqueued=self._enqueued,
            on_wait=self._waiting,
        )
        await self._publish(BackpressureLevel.OK, "overflow_drained")

    def _enqueued(self, item: T) -> None:
        self.stats.enqueued += 1
        ITEMS_ENQUEUED_TOTAL.labels(coord_id=self._coord_id).inc()
        logger.info(f"Queued {self._describe(item)} ({self._queue.size}/{self._queue.capacity})")

    def _waiting(self, item: T, attempt: int, delay: float) -> None:
        ENQUEUE_RETRY_WAITS_TOTAL.labels(coord_id=self._coord_id).inc()
        logger.info(
            f"Queue is still full. Waiting {delay:.2f}s before retry #{attempt} "
            f"for {self._describe(item)} (buffered={len(self._buffer)})"
        )

    async def _publish(self, level: BackpressureLevel, reason: str) -> None:
        if self._feedback is None:
            return
        await self._feedback.publish(
            FeedbackEvent(
                coordinator_id=self._coord_id,
                queue_size=self._queue.size,
                capacity=self._queue.capacity,
                level=level,
                buffered=len(self._buffer),
                reason=reason,
            )
        )
