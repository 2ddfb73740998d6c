"""Tests for app-wide behaviour: health, headers, envelopes."""

import pytest

from ridehail.api.middleware.security_headers import SECURITY_HEADERS


@pytest.mark.unit
class TestApp:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_security_headers(self, client):
        response = client.get("/health")

        for name, value in SECURITY_HEADERS.items():
            assert response.headers[name] == value

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 32

    def test_unknown_route_uses_failure_envelope(self, client):
        response = client.get("/no/such/route")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND"
        assert "timestamp" in body["error"]

    def test_cors_preflight(self, client):
        response = client.options(
            "/rides/estimate",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_unsafe_request_id_is_replaced(self, client):
        response = client.get("/health", headers={"X-Request-ID": "<script>alert(1)</script>"})

        assert response.headers["X-Request-ID"] != "<script>alert(1)</script>"
        assert len(response.headers["X-Request-ID"]) == 32
