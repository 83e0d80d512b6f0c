from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional

import httpx
from loguru import logger

from ..metrics.registry import QUEUE_DEPTH

from .dlq import DeadLetterQueue
from .feedback import FeedbackBus
from .overflow import Producer, Sleep
from .policy import RetryPolicy
from .queue import BoundedQueue
from .types import CoordinatorHealth, CrawlOutcome, CrawlReport, Sink, WorkItem, describe_item
from .worker import CrawlWorker


class CrawlCoordinator:
    """Producer -> BoundedQueue -> CrawlWorker pool -> Sink.

    Completion requires all three of: the producer has finished (source
    exhausted and overflow buffer empty), the queue is empty, and every
    dequeued item has been acknowledged. Only then is the queue closed so the
    idle workers exit.

    Usage:

        async with NdjsonSink("univResult.json") as sink:
            coord = CrawlCoordinator(source.produce(), sink, capacity=100, workers=10)
            report = await coord.run()
    """

    def __init__(
        self,
        items: Iterable[WorkItem],
        sink: Sink,
        *,
        capacity: int = 100,
        workers: int = 10,
        retry_policy: Optional[RetryPolicy] = None,
        client: Optional[httpx.AsyncClient] = None,
        fetch_timeout: float = 30.0,
        user_agent: Optional[str] = None,
        max_connections: int = 20,
        dlq: Optional[DeadLetterQueue[WorkItem]] = None,
        feedback: Optional[FeedbackBus] = None,
        coord_id: str = "crawl",
        sleep: Sleep = asyncio.sleep,
    ):
        if workers <= 0:
            raise ValueError("workers must be > 0")

        self._items = items
        self._sink = sink
        self._workers_n = workers
        self._retry = retry_policy or RetryPolicy()
        self._client = client
        self._owns_client = client is None
        self._fetch_timeout = fetch_timeout
        self._user_agent = user_agent
        self._max_connections = max_connections
        self._dlq = dlq
        self._feedback = feedback
        self._coord_id = coord_id
        self._sleep = sleep

        self._q: BoundedQueue[WorkItem] = BoundedQueue(capacity)
        self._workers: List[CrawlWorker] = []
        self._producer: Optional[Producer[WorkItem]] = None
        self._producer_task: Optional[asyncio.Task] = None
        self._report = CrawlReport()
        self._started = False
        self._finished = False

    # ---------- lifecycle ----------

    async def __aenter__(self) -> "CrawlCoordinator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop(drain=exc_type is None)

    async def start(self) -> None:
        if self._started:
            return
        self._started = True

        if self._client is None:
            headers = {"User-Agent": self._user_agent} if self._user_agent else {}
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._fetch_timeout),
                limits=httpx.Limits(max_connections=self._max_connections),
                follow_redirects=True,
                headers=headers,
            )

        for wid in range(1, self._workers_n + 1):
            w = CrawlWorker(
                worker_id=wid,
                queue=self._q,
                client=self._client,
                sink=self._sink,
                fetch_timeout=self._fetch_timeout,
                dlq=self._dlq,
                on_outcome=self._on_outcome,
                coord_id=self._coord_id,
            )
            w.start()
            self._workers.append(w)

        self._producer = Producer(
            self._q,
            self._items,
            self._retry,
            coord_id=self._coord_id,
            feedback=self._feedback,
            sleep=self._sleep,
            describe=describe_item,
        )
        self._producer_task = asyncio.create_task(self._producer.run(), name="crawl-producer")
        logger.info(
            f"Crawl coordinator '{self._coord_id}' started: "
            f"workers={self._workers_n} capacity={self._q.capacity}"
        )

    async def wait(self) -> CrawlReport:
        """Block until the three-way completion barrier is met; return the report."""
        if not self._started:
            raise RuntimeError("coordinator not started")
        if self._finished:
            return self._report

        assert self._producer_task is not None
        worker_tasks = [w.task for w in self._workers if w.task is not None]

        # Phase 1: producer finishes, unless the pool dies while it is still buffering
        try:
            done, _ = await asyncio.wait(
                {self._producer_task, *worker_tasks}, return_when=asyncio.FIRST_COMPLETED
            )
        except BaseException:
            await self._cancel_all()
            raise
        if self._producer_task not in done:
            await self._abort_on_worker_exit(worker_tasks)

        try:
            stats = self._producer_task.result()
        except BaseException:
            await self._cancel_all()
            raise

        # Phase 2: every enqueued item acknowledged
        join_task = asyncio.create_task(self._q.join())
        try:
            done, _ = await asyncio.wait(
                {join_task, *worker_tasks}, return_when=asyncio.FIRST_COMPLETED
            )
        except BaseException:
            join_task.cancel()
            await self._cancel_all()
            raise

        if join_task not in done:
            join_task.cancel()
            await self._abort_on_worker_exit(worker_tasks)

        self._q.close()
        await asyncio.gather(*(w.wait() for w in self._workers))

        self._report.produced = stats.produced
        self._report.enqueued = stats.enqueued
        self._report.overflow_events = stats.overflow_events
        self._report.retry_waits = stats.retry_waits
        self._finished = True
        QUEUE_DEPTH.labels(coord_id=self._coord_id).set(0)

        logger.success(
            f"Crawl '{self._coord_id}' complete: enqueued={self._report.enqueued} "
            f"succeeded={self._report.succeeded} skipped={self._report.skipped_total}"
        )
        return self._report

    async def stop(self, drain: bool = True, timeout: Optional[float] = None) -> None:
        """Stop the pipeline; with ``drain`` wait for the completion barrier first."""
        try:
            if self._started and not self._finished:
                if drain:
                    if timeout is None:
                        await self.wait()
                    else:
                        await asyncio.wait_for(self.wait(), timeout=timeout)
                else:
                    await self._cancel_all()
        finally:
            self._q.close()
            if self._owns_client and self._client is not None:
                await self._client.aclose()
                self._client = None

    async def run(self) -> CrawlReport:
        """start + wait + stop."""
        await self.start()
        try:
            return await self.wait()
        finally:
            await self.stop(drain=False)

    # ---------- observability ----------

    @property
    def report(self) -> CrawlReport:
        return self._report

    @property
    def queue(self) -> BoundedQueue[WorkItem]:
        return self._q

    def health(self) -> CoordinatorHealth:
        alive = sum(1 for w in self._workers if w.is_alive())
        QUEUE_DEPTH.labels(coord_id=self._coord_id).set(self._q.size)
        return CoordinatorHealth(
            workers_alive=alive,
            queue_size=self._q.size,
            capacity=self._q.capacity,
            buffered=self._producer.buffered if self._producer else 0,
            producer_done=self._producer.done if self._producer else False,
        )

    # ---------- internals ----------

    async def _on_outcome(self, outcome: CrawlOutcome) -> None:
        self._report.dequeued += 1
        if outcome.ok:
            self._report.succeeded += 1
        else:
            reason = outcome.reason or "skipped"
            self._report.skipped[reason] = self._report.skipped.get(reason, 0) + 1
        QUEUE_DEPTH.labels(coord_id=self._coord_id).set(self._q.size)

    async def _abort_on_worker_exit(self, worker_tasks: List[asyncio.Task]) -> None:
        """A worker ended while work was outstanding: tear down and re-raise its error."""
        await self._cancel_all()
        errors = [t.exception() for t in worker_tasks if t.done() and not t.cancelled()]
        for err in errors:
            if err is not None:
                raise err
        raise RuntimeError("crawl worker exited before the queue drained")

    async def _cancel_all(self) -> None:
        if self._producer_task is not None and not self._producer_task.done():
            self._producer_task.cancel()
            try:
                await self._producer_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"Producer failed during shutdown: {type(e).__name__}: {e}")
        self._q.close()
        await asyncio.gather(*(w.stop() for w in self._workers))
