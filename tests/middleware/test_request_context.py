from __future__ import annotations

import uuid

from fastapi.testclient import TestClient


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    uuid.UUID(resp.headers["x-request-id"])


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "my-request-id-123"})
    assert resp.headers.get("x-request-id") == "my-request-id-123"


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/student/stats")
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None


def test_rate_limit_headers_only_on_limited_routes(client: TestClient) -> None:
    assert "x-ratelimit-limit" not in client.get("/health").headers
