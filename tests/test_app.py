"""Tests for app-level routes, middleware and error handling."""

from fastapi.testclient import TestClient


def test_health_check(client: TestClient):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["app"] == "voice-signage"
    assert data["database"] == "ok"


def test_display_screen_page(client: TestClient):
    """The signage page subscribes to the rotation stream."""
    resp = client.get("/displayscreen")
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]
    assert "/display/stream" in resp.text


def test_security_headers(client: TestClient):
    resp = client.get("/api/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "default-src 'self'" in resp.headers["Content-Security-Policy"]


def test_oversized_request_rejected(client: TestClient):
    """Bodies declared larger than the upload limit are refused before parsing."""
    resp = client.post(
        "/upload-audio",
        content=b"x",
        headers={"content-length": str(100 * 1024 * 1024), "content-type": "application/octet-stream"},
    )
    assert resp.status_code == 413
    assert resp.json() == {"success": False, "error": "Request body too large"}


def test_unknown_route_is_404(client: TestClient):
    assert client.get("/nope").status_code == 404
