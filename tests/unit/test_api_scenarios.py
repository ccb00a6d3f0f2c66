"""
Name: API Scenario Tests

Responsibilities:
  - Drive the HTTP surface end to end over in-memory stores
  - Integration key lifecycle (create, use, deactivate, rejected)
  - Register/login, role gates, /auth/me and /metrics

Notes:
  - Services come from the conftest `app` fixture via dependency_overrides
"""

import pytest

from tests.helpers import bearer

pytestmark = pytest.mark.unit

API = "/api/v1"


def _create_key(client, admin_token, name="partner-x") -> dict:
    response = client.post(
        f"{API}/admin/apikeys", json={"name": name}, headers=bearer(admin_token)
    )
    assert response.status_code == 200
    return response.json()


class TestIntegrationKeyLifecycle:
    def test_active_key_reads_shipments_until_deactivated(self, client, admin_token):
        created = _create_key(client, admin_token)
        key_headers = {"X-API-Key": created["api_key"]}

        ok = client.get(f"{API}/integration/shipments", headers=key_headers)
        assert ok.status_code == 200
        assert ok.json()["integration_key_name"] == "partner-x"

        deactivated = client.patch(
            f"{API}/admin/apikeys/{created['id']}/deactivate",
            headers=bearer(admin_token),
        )
        assert deactivated.status_code == 200
        assert deactivated.json() == {"message": "API key deactivated."}

        rejected = client.get(f"{API}/integration/shipments", headers=key_headers)
        assert rejected.status_code == 401

    def test_integration_route_requires_key(self, client):
        assert client.get(f"{API}/integration/shipments").status_code == 401

    def test_session_token_does_not_open_integration_route(self, client, admin_token):
        response = client.get(
            f"{API}/integration/shipments", headers=bearer(admin_token)
        )
        assert response.status_code == 401

    def test_shipments_are_listed_for_active_key(self, client, admin_token, shipment_feed):
        from logitrack.domain.entities import IntegrationShipment

        shipment_feed.add(
            IntegrationShipment(id=7, reference="SHP-7", status="InTransit")
        )
        created = _create_key(client, admin_token)

        body = client.get(
            f"{API}/integration/shipments", headers={"X-API-Key": created["api_key"]}
        ).json()

        assert body["count"] == 1
        assert body["data"][0]["reference"] == "SHP-7"

    def test_list_never_exposes_secrets(self, client, admin_token):
        _create_key(client, admin_token)

        listed = client.get(f"{API}/admin/apikeys", headers=bearer(admin_token)).json()

        assert listed[0]["name"] == "partner-x"
        assert "api_key" not in listed[0]

    def test_blank_name_is_400(self, client, admin_token):
        response = client.post(
            f"{API}/admin/apikeys", json={"name": "   "}, headers=bearer(admin_token)
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_deactivate_unknown_key_is_404(self, client, admin_token):
        response = client.patch(
            f"{API}/admin/apikeys/999/deactivate", headers=bearer(admin_token)
        )
        assert response.status_code == 404

    def test_deactivate_out_of_range_id_is_404(self, client, admin_token):
        response = client.patch(
            f"{API}/admin/apikeys/99999999999999999999/deactivate",
            headers=bearer(admin_token),
        )
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_deactivate_twice_succeeds(self, client, admin_token):
        created = _create_key(client, admin_token)
        url = f"{API}/admin/apikeys/{created['id']}/deactivate"

        assert client.patch(url, headers=bearer(admin_token)).status_code == 200
        assert client.patch(url, headers=bearer(admin_token)).status_code == 200


class TestAuthFlow:
    def test_register_then_login(self, client, token_service):
        registered = client.post(
            f"{API}/auth/register",
            json={"email": "a@b.com", "password": "Secret1", "role": "User"},
        )
        assert registered.status_code == 200
        assert registered.json()["roles"] == ["User"]

        logged_in = client.post(
            f"{API}/auth/login",
            json={"email_or_username": "a@b.com", "password": "Secret1"},
        )
        body = logged_in.json()
        assert logged_in.status_code == 200
        assert body["roles"] == ["User"]
        assert body["token_type"] == "bearer"

        claims = token_service.validate(body["token"])
        assert claims.email == "a@b.com"
        assert claims.roles == ("User",)

        me = client.get(f"{API}/auth/me", headers=bearer(body["token"]))
        assert {"type": "roles", "value": "User"} in me.json()

    def test_weak_password_is_400_with_errors(self, client):
        response = client.post(
            f"{API}/auth/register", json={"email": "a@b.com", "password": "abc"}
        )

        assert response.status_code == 400
        codes = {e["code"] for e in response.json()["errors"]}
        assert "PasswordRequiresDigit" in codes

    def test_missing_body_fields_is_400(self, client):
        response = client.post(f"{API}/auth/login", json={})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_bad_credentials_is_401(self, client):
        response = client.post(
            f"{API}/auth/login",
            json={"email_or_username": "nobody@b.com", "password": "Secret1"},
        )

        assert response.status_code == 401
        assert response.headers["content-type"].startswith("application/problem+json")

    def test_me_returns_claims(self, client, user_token):
        response = client.get(f"{API}/auth/me", headers=bearer(user_token))

        assert response.status_code == 200
        claims = response.json()
        assert {"type": "roles", "value": "User"} in claims
        assert {"type": "email", "value": "user@example.com"} in claims

    def test_me_without_token_is_401(self, client):
        response = client.get(f"{API}/auth/me")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_me_with_forged_token_is_401(self, client):
        response = client.get(f"{API}/auth/me", headers=bearer("not.a.token"))
        assert response.status_code == 401


class TestRoleGates:
    def test_user_token_on_admin_route_is_403(self, client, user_token):
        response = client.get(f"{API}/admin/apikeys", headers=bearer(user_token))

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_metrics_for_admin(self, client, admin_token):
        client.get(f"{API}/auth/me", headers=bearer(admin_token))

        response = client.get(f"{API}/metrics", headers=bearer(admin_token))

        assert response.status_code == 200
        body = response.json()
        assert body["total_requests"] >= 1
        assert {"endpoint": "Auth", "count": 1} in body["per_endpoint"]

    def test_metrics_for_user_is_403(self, client, user_token):
        assert client.get(f"{API}/metrics", headers=bearer(user_token)).status_code == 403

    def test_prometheus_exposition_for_admin(self, client, admin_token):
        client.get(f"{API}/auth/me", headers=bearer(admin_token))

        response = client.get(f"{API}/metrics/prometheus", headers=bearer(admin_token))

        assert response.status_code == 200
        assert "logitrack_requests_total" in response.text
