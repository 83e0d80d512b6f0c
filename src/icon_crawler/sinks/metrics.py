from prometheus_client import Counter, Histogram

SINK_WRITES_TOTAL = Counter(
    "crawl_sink_writes_total",
    "Records appended by result sinks",
    ["sink", "status"],
)

SINK_WRITE_LATENCY = Histogram(
    "crawl_sink_write_latency_seconds",
    "Sink append latency in seconds (including lock wait)",
    ["sink"],
    buckets=[0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)
