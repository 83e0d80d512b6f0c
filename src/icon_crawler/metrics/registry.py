"""
Crawl pipeline metrics in the Prometheus global REGISTRY.
Sink write metrics live in icon_crawler.sinks.metrics.
"""

from prometheus_client import Counter, Gauge

# --- Producer Metrics ---

ITEMS_ENQUEUED_TOTAL = Counter(
    "crawl_items_enqueued_total",
    "Work items placed on the crawl queue",
    ["coord_id"],
)

OVERFLOW_EVENTS_TOTAL = Counter(
    "crawl_overflow_events_total",
    "Times the producer entered overflow mode because the queue was full",
    ["coord_id"],
)

ENQUEUE_RETRY_WAITS_TOTAL = Counter(
    "crawl_enqueue_retry_waits_total",
    "Sleeps taken by the producer before re-attempting a rejected enqueue",
    ["coord_id"],
)

# --- Worker Metrics ---

ITEMS_PROCESSED_TOTAL = Counter(
    "crawl_items_processed_total",
    "Work items finished by workers",
    ["coord_id", "outcome"],
)

QUEUE_DEPTH = Gauge(
    "crawl_queue_depth",
    "Current crawl queue depth",
    ["coord_id"],
)

