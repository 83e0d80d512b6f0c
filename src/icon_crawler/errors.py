"""Exception hierarchy for the crawl pipeline."""


class CrawlerError(Exception):
    """Base error for the crawl pipeline."""


class QueueFullError(CrawlerError):
    """Raised by a non-blocking enqueue when the queue is at capacity."""


class QueueClosedError(CrawlerError):
    """Raised on enqueue after close, and on dequeue once closed and drained."""


class SinkWriteError(CrawlerError):
    """Sink could not open or append to its destination."""
