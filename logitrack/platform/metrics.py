"""
Name: Request Metrics

Responsibilities:
  - Accumulate process-wide request statistics (count, latency, per endpoint)
  - Produce read-only snapshots for the admin /metrics endpoint
  - Export the same observations as Prometheus counters and histograms

Collaborators:
  - middleware.py: records one observation per completed request
  - api/metrics_routes.py: serves snapshot() and the Prometheus exposition

Constraints:
  - The aggregate is the only shared mutable state in the access core;
    every update happens under one lock, in constant time
  - Low cardinality Prometheus labels only (endpoint group, method, status)

Notes:
  - Instances are constructor-injected into the app (no module globals),
    so tests can build isolated aggregates
"""

from dataclasses import dataclass, field
from threading import Lock

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


@dataclass(frozen=True)
class EndpointCount:
    endpoint: str
    count: int


@dataclass(frozen=True)
class MetricsSnapshot:
    """R: Point-in-time view of the aggregate, per-endpoint sorted by name."""

    total_requests: int
    average_response_time_ms: float
    per_endpoint: list[EndpointCount] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_requests": self.total_requests,
            "average_response_time_ms": self.average_response_time_ms,
            "per_endpoint": [
                {"endpoint": item.endpoint, "count": item.count}
                for item in self.per_endpoint
            ],
        }


class RequestMetrics:
    """
    R: Thread-safe request aggregate.

    Methods:
        record: register one completed request
        snapshot: rounded, sorted read-only view
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._total_requests = 0
        self._total_elapsed_ms = 0.0
        self._per_endpoint: dict[str, int] = {}

    def record(self, endpoint: str, elapsed_ms: float) -> None:
        """R: Register one request. Negative durations are clamped to 0."""
        elapsed = max(float(elapsed_ms), 0.0)
        with self._lock:
            self._total_requests += 1
            self._total_elapsed_ms += elapsed
            self._per_endpoint[endpoint] = self._per_endpoint.get(endpoint, 0) + 1

    @property
    def total_requests(self) -> int:
        with self._lock:
            return self._total_requests

    @property
    def average_response_time_ms(self) -> float:
        """R: accumulator / count, 0 when nothing was recorded."""
        with self._lock:
            if self._total_requests == 0:
                return 0.0
            return self._total_elapsed_ms / self._total_requests

    def per_endpoint_counts(self) -> dict[str, int]:
        """R: Copy of the per-endpoint counters."""
        with self._lock:
            return dict(self._per_endpoint)

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            total = self._total_requests
            elapsed = self._total_elapsed_ms
            counts = dict(self._per_endpoint)

        average = elapsed / total if total else 0.0
        return MetricsSnapshot(
            total_requests=total,
            average_response_time_ms=round(average, 2),
            per_endpoint=[
                EndpointCount(endpoint=name, count=counts[name])
                for name in sorted(counts)
            ],
        )


class PrometheusMetrics:
    """R: Prometheus view of the same request stream, on a private registry."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self._requests_total = Counter(
            "logitrack_requests_total",
            "Total HTTP requests",
            ["endpoint", "method", "status"],
            registry=self.registry,
        )
        # Buckets: 5ms .. 5s
        self._request_latency = Histogram(
            "logitrack_request_latency_seconds",
            "HTTP request latency in seconds",
            ["endpoint", "method"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self.registry,
        )

    def observe(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        latency_seconds: float,
    ) -> None:
        self._requests_total.labels(
            endpoint=endpoint,
            method=method,
            status=status_bucket(status_code),
        ).inc()
        self._request_latency.labels(endpoint=endpoint, method=method).observe(
            max(latency_seconds, 0.0)
        )

    def render(self) -> tuple[bytes, str]:
        """R: (body, content_type) for the exposition endpoint."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


def status_bucket(code: int) -> str:
    """R: Bucket status code (2xx, 3xx, 4xx, 5xx)."""
    if 200 <= code < 300:
        return "2xx"
    elif 300 <= code < 400:
        return "3xx"
    elif 400 <= code < 500:
        return "4xx"
    elif 500 <= code < 600:
        return "5xx"
    return "other"
