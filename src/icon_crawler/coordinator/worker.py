from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

import httpx
from loguru import logger

from ..extract import DocumentParseError, extract_icon_links
from ..metrics.registry import ITEMS_PROCESSED_TOTAL
from ..urls import normalize_website
from .dlq import DeadLetterQueue
from .queue import BoundedQueue
from .types import (
    CrawlOutcome,
    EnrichedResult,
    QueueClosedError,
    Sink,
    SinkWriteError,
    WorkItem,
)

OutcomeCallback = Callable[[CrawlOutcome], Awaitable[None]]


class CrawlWorker:
    """Pulls WorkItems off the queue until it is closed and drained.

    Per item: normalize the website, fetch it under a deadline, extract
    favicon links, append the EnrichedResult to the sink. Every per-item
    failure is logged and turned into ``CrawlOutcome.skip``; nothing an item
    does can stop the worker.
    """

    def __init__(
        self,
        worker_id: int,
        queue: BoundedQueue[WorkItem],
        client: httpx.AsyncClient,
        sink: Sink,
        *,
        fetch_timeout: float = 30.0,
        dlq: Optional[DeadLetterQueue[WorkItem]] = None,
        on_outcome: Optional[OutcomeCallback] = None,
        coord_id: str = "crawl",
    ):
        self.worker_id = worker_id
        self._q = queue
        self._client = client
        self._sink = sink
        self._fetch_timeout = fetch_timeout
        self._dlq = dlq
        self._on_outcome = on_outcome
        self._coord_id = coord_id
        self._task: Optional[asyncio.Task] = None
        self._log = logger.bind(worker=worker_id)
        self.processed = 0

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"crawl-worker-{self.worker_id}")

    async def stop(self) -> None:
        """Cancel the pull loop (in-progress item is abandoned)."""
        if self._task is None or self._task.done():
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def is_alive(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        self._log.debug(f"Worker {self.worker_id} started")
        while True:
            try:
                item = await self._q.get()
            except QueueClosedError:
                break
            try:
                try:
                    outcome = await self.process(item)
                except Exception as e:
                    self._log.exception(f"Unexpected error while crawling {item.identifier}")
                    outcome = CrawlOutcome.skip(item, "unexpected_error", f"{type(e).__name__}: {e}")
                self.processed += 1
                await self._record(outcome)
            finally:
                self._q.task_done()
        self._log.debug(f"Worker {self.worker_id} exiting after {self.processed} item(s)")

    async def process(self, item: WorkItem) -> CrawlOutcome:
        """One unit of work. Never raises for per-item failures."""
        log = self._log.bind(kode=item.identifier)
        website = normalize_website(item.website)
        log.info(f"Scraping website: {website} ({item.name}, worker {self.worker_id})")

        try:
            body = await asyncio.wait_for(self._fetch(website), timeout=self._fetch_timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            log.error(f"Timed out fetching {website}: {e!r}")
            return CrawlOutcome.skip(item, "timeout", str(e) or "deadline exceeded")
        except httpx.InvalidURL as e:
            log.error(f"Invalid website address {website!r}: {e}")
            return CrawlOutcome.skip(item, "invalid_url", str(e))
        except httpx.HTTPError as e:
            log.error(f"Failed to fetch {website}: {type(e).__name__}: {e}")
            return CrawlOutcome.skip(item, "transport_error", f"{type(e).__name__}: {e}")

        try:
            icon_urls = await asyncio.to_thread(extract_icon_links, body)
        except DocumentParseError as e:
            log.error(f"Cannot parse document from {website}: {e}")
            return CrawlOutcome.skip(item, "parse_error", str(e))

        result = EnrichedResult.from_item(item, website, icon_urls)
        try:
            await self._sink.append(result)
        except SinkWriteError as e:
            log.error(f"Failed to persist result for {website}: {e}")
            return CrawlOutcome.skip(item, "sink_error", str(e))

        log.info(f"Found {len(icon_urls)} icon link(s) on {website}")
        return CrawlOutcome.success(item, result)

    async def _fetch(self, url: str) -> bytes:
        resp = await self._client.get(url)
        if resp.status_code >= 400:
            self._log.warning(f"{url} answered HTTP {resp.status_code}; parsing body anyway")
        return resp.content

    async def _record(self, outcome: CrawlOutcome) -> None:
        label = "ok" if outcome.ok else outcome.reason or "skipped"
        ITEMS_PROCESSED_TOTAL.labels(coord_id=self._coord_id, outcome=label).inc()
        if not outcome.ok and self._dlq is not None:
            try:
                await self._dlq.save(
                    [outcome.item],
                    outcome.detail or label,
                    {"reason": label, "worker": self.worker_id},
                )
            except SinkWriteError as e:
                self._log.error(f"DLQ write failed for {outcome.item.identifier}: {e}")
        if self._on_outcome is not None:
            await self._on_outcome(outcome)
