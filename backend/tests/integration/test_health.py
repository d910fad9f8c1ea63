"""Integration tests for liveness and readiness endpoints."""

from __future__ import annotations


def test_health_is_ok(client, app):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_ready_reports_db_and_cache(client, app):
    resp = client.get("/api/v1/ready")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["db"] == "ok"
    assert set(body["cache"]) == {"size", "maxSize", "ttlSeconds", "hits", "misses", "evictions"}
    assert body["cache"]["maxSize"] == 500


def test_request_id_is_echoed(client, app):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated(client, app):
    resp = client.get("/api/v1/health")
    assert resp.headers["X-Request-ID"]
