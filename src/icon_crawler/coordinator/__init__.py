"""Crawl Coordinator

Core producer→queue→worker→sink pipeline with:
- BoundedQueue (non-blocking try_put, close-aware get, in-flight tracking)
- Producer with OverflowBuffer and fixed-interval RetryPolicy
- CrawlWorker pool (fetch → favicon extraction → sink)
- CrawlCoordinator orchestration, completion barrier & health checks
- FeedbackBus saturation signals
- Dead Letter Queue (file-based NDJSON)
- Environment-based settings
"""

from .types import (
    CrawlerError,
    QueueFullError,
    QueueClosedError,
    SinkWriteError,
    WorkItem,
    EnrichedResult,
    CrawlOutcome,
    CrawlReport,
    CoordinatorHealth,
    Sink,
)
from .policy import RetryPolicy
from .queue import BoundedQueue
from .feedback import BackpressureLevel, FeedbackEvent, FeedbackBus, feedback_bus
from .dlq import DeadLetterQueue, DLQRecord
from .overflow import OverflowBuffer, Producer, ProducerStats
from .worker import CrawlWorker
from .crawl_coordinator import CrawlCoordinator
from .settings import CoordinatorRuntimeSettings

__all__ = [
    # types
    "CrawlerError",
    "QueueFullError",
    "QueueClosedError",
    "SinkWriteError",
    "WorkItem",
    "EnrichedResult",
    "CrawlOutcome",
    "CrawlReport",
    "CoordinatorHealth",
    "Sink",
    "DLQRecord",
    # policies
    "RetryPolicy",
    # feedback
    "BackpressureLevel",
    "FeedbackEvent",
    "FeedbackBus",
    "feedback_bus",
    # runtime
    "BoundedQueue",
    "OverflowBuffer",
    "Producer",
    "ProducerStats",
    "CrawlWorker",
    "CrawlCoordinator",
    "CoordinatorRuntimeSettings",
    # tooling
    "DeadLetterQueue",
]
