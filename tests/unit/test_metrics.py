"""
Name: Request Metrics Tests

Responsibilities:
  - Aggregate arithmetic (count, average, per-endpoint)
  - Snapshot rounding and ordering
  - No lost updates under concurrent recording
  - Prometheus export on a private registry
"""

import threading

import pytest

from logitrack.platform.metrics import (
    EndpointCount,
    PrometheusMetrics,
    RequestMetrics,
    status_bucket,
)

pytestmark = pytest.mark.unit


def test_empty_aggregate_reports_zero():
    snapshot = RequestMetrics().snapshot()

    assert snapshot.total_requests == 0
    assert snapshot.average_response_time_ms == 0
    assert snapshot.per_endpoint == []


def test_record_updates_totals_and_endpoint_counts():
    metrics = RequestMetrics()
    metrics.record("Auth", 10.0)
    metrics.record("Auth", 20.0)
    metrics.record("AdminApiKeys", 30.0)

    assert metrics.total_requests == 3
    assert metrics.average_response_time_ms == pytest.approx(20.0)
    assert metrics.per_endpoint_counts() == {"Auth": 2, "AdminApiKeys": 1}


def test_snapshot_rounds_average_to_two_decimals():
    metrics = RequestMetrics()
    for elapsed in (1, 2, 2):
        metrics.record("Auth", elapsed)

    assert metrics.snapshot().average_response_time_ms == 1.67


def test_snapshot_sorts_endpoints_by_name():
    metrics = RequestMetrics()
    for name in ("Metrics", "Auth", "UnknownController", "AdminApiKeys"):
        metrics.record(name, 1.0)

    names = [item.endpoint for item in metrics.snapshot().per_endpoint]
    assert names == sorted(names)


def test_snapshot_is_detached_from_later_records():
    metrics = RequestMetrics()
    metrics.record("Auth", 5.0)

    snapshot = metrics.snapshot()
    metrics.record("Auth", 5.0)

    assert snapshot.total_requests == 1
    assert snapshot.per_endpoint == [EndpointCount(endpoint="Auth", count=1)]


def test_negative_duration_is_clamped():
    metrics = RequestMetrics()
    metrics.record("Auth", -5.0)

    assert metrics.average_response_time_ms == 0


def test_to_dict_shape():
    metrics = RequestMetrics()
    metrics.record("Auth", 4.0)

    assert metrics.snapshot().to_dict() == {
        "total_requests": 1,
        "average_response_time_ms": 4.0,
        "per_endpoint": [{"endpoint": "Auth", "count": 1}],
    }


def test_aggregate_only_grows():
    """No reset hook: counts survive any number of snapshots."""
    metrics = RequestMetrics()
    metrics.record("Auth", 4.0)

    for _ in range(3):
        metrics.snapshot()

    assert not hasattr(metrics, "reset")
    assert metrics.snapshot().total_requests == 1


def test_concurrent_records_are_not_lost():
    metrics = RequestMetrics()
    threads_count, per_thread = 8, 1000

    def worker(index: int) -> None:
        endpoint = "Even" if index % 2 == 0 else "Odd"
        for _ in range(per_thread):
            metrics.record(endpoint, 1.0)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = metrics.snapshot()
    assert snapshot.total_requests == threads_count * per_thread
    assert snapshot.average_response_time_ms == 1.0
    assert sum(item.count for item in snapshot.per_endpoint) == snapshot.total_requests
    assert metrics.per_endpoint_counts() == {"Even": 4000, "Odd": 4000}


def test_prometheus_render_contains_observations():
    prometheus = PrometheusMetrics()
    prometheus.observe(endpoint="Auth", method="POST", status_code=401, latency_seconds=0.01)

    body, content_type = prometheus.render()

    text = body.decode()
    assert 'logitrack_requests_total{endpoint="Auth",method="POST",status="4xx"} 1.0' in text
    assert "logitrack_request_latency_seconds_bucket" in text
    assert content_type.startswith("text/plain")


def test_prometheus_instances_do_not_share_registries():
    PrometheusMetrics()
    PrometheusMetrics()


@pytest.mark.parametrize(
    "code, bucket",
    [(200, "2xx"), (302, "3xx"), (404, "4xx"), (503, "5xx"), (99, "other")],
)
def test_status_bucket(code, bucket):
    assert status_bucket(code) == bucket
