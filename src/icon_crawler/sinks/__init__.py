"""
Result sinks for the crawl pipeline.

Every sink serializes concurrent appends and records
``crawl_sink_writes_total`` / ``crawl_sink_write_latency_seconds``.
"""

from .metrics import SINK_WRITES_TOTAL, SINK_WRITE_LATENCY
from .base import Sink
from .ndjson import NdjsonSink, encode_record

__all__ = [
    "SINK_WRITES_TOTAL",
    "SINK_WRITE_LATENCY",
    "Sink",
    "NdjsonSink",
    "encode_record",
]
