"""
Name: Request Instrumentation Middleware Tests

Responsibilities:
  - Every request is counted once, whatever its outcome
  - Endpoint group resolves to the route tag, else UnknownController
  - Request id is propagated in the response header
"""

import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from logitrack.platform.middleware import UNKNOWN_ENDPOINT

pytestmark = pytest.mark.unit


def test_success_is_counted_under_route_tag(client, request_metrics):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "a@b.com", "password": "Secret1"},
    )

    assert response.status_code == 200
    assert request_metrics.per_endpoint_counts() == {"Auth": 1}


def test_rejected_by_access_gate_is_still_counted(client, request_metrics):
    response = client.get("/api/v1/admin/apikeys")

    assert response.status_code == 401
    assert request_metrics.total_requests == 1
    assert request_metrics.per_endpoint_counts() == {"AdminApiKeys": 1}


def test_unmatched_route_counts_as_unknown(client, request_metrics):
    response = client.get("/api/v1/does-not-exist")

    assert response.status_code == 404
    assert request_metrics.per_endpoint_counts() == {UNKNOWN_ENDPOINT: 1}


def test_handler_exception_returns_500_and_is_counted(app, request_metrics):
    router = APIRouter(tags=["Boom"])

    @router.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    app.include_router(router)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/boom")

    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_ERROR"
    assert request_metrics.per_endpoint_counts() == {"Boom": 1}


def test_untagged_route_falls_back_to_route_name(app, request_metrics):
    @app.get("/plain")
    def plain_handler():
        return {"ok": True}

    TestClient(app).get("/plain")

    assert request_metrics.per_endpoint_counts() == {"plain_handler": 1}


def test_response_carries_request_id(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    request_id = response.headers["X-Request-Id"]
    assert response.json()["request_id"] == request_id


def test_each_request_adds_exactly_one_observation(client, request_metrics, admin_token):
    headers = {"Authorization": f"Bearer {admin_token}"}
    for _ in range(3):
        client.get("/api/v1/admin/apikeys", headers=headers)
    client.get("/api/v1/metrics", headers=headers)

    snapshot = request_metrics.snapshot()
    assert snapshot.total_requests == 4
    assert {e.endpoint: e.count for e in snapshot.per_endpoint} == {
        "AdminApiKeys": 3,
        "Metrics": 1,
    }
