from ..sinks.metrics import SINK_WRITES_TOTAL, SINK_WRITE_LATENCY
from .registry import (
    ITEMS_ENQUEUED_TOTAL,
    OVERFLOW_EVENTS_TOTAL,
    ENQUEUE_RETRY_WAITS_TOTAL,
    ITEMS_PROCESSED_TOTAL,
    QUEUE_DEPTH,
)

__all__ = [
    "ITEMS_ENQUEUED_TOTAL",
    "OVERFLOW_EVENTS_TOTAL",
    "ENQUEUE_RETRY_WAITS_TOTAL",
    "ITEMS_PROCESSED_TOTAL",
    "QUEUE_DEPTH",
    "SINK_WRITES_TOTAL",
    "SINK_WRITE_LATENCY",
]
