"""Prometheus metrics for export operations."""

from prometheus_client import Counter, Gauge, Histogram

export_total = Counter(
    "tripdoc_export_total",
    "Total export and preview requests",
    ["format", "outcome"],
)

export_latency_ms = Histogram(
    "tripdoc_export_latency_ms",
    "Export encoding latency in milliseconds",
    ["format"],
    buckets=[1, 5, 10, 50, 100, 250, 500, 1000, 2000, 4000, 8000],
)

preview_handles_live = Gauge(
    "tripdoc_preview_handles_live",
    "Rendered preview documents currently held in memory",
)


class PrometheusExportMetrics:
    """Prometheus-based export metrics implementation."""

    def record_latency(self, fmt: str, latency_ms: float) -> None:
        """Record encoding latency."""
        export_latency_ms.labels(format=fmt).observe(latency_ms)

    def inc_outcome(self, fmt: str, outcome: str) -> None:
        """Increment the request counter for one outcome."""
        export_total.labels(format=fmt, outcome=outcome).inc()
