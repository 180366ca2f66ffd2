import json

from conftest import ADMIN_PASSWORD


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["db"] == {"ok": True, "error": None}
    assert body["missing"] == []


def test_health_reports_missing_secret(tmp_path):
    from fastapi.testclient import TestClient

    from conftest import make_settings
    from main import create_app

    with TestClient(create_app(make_settings(tmp_path, ADMIN_PASSWORD=""))) as c:
        body = c.get("/health").json()
    assert body["status"] == "degraded"
    assert body["missing"] == ["ADMIN_PASSWORD"]


def test_health_text(client):
    resp = client.get("/health.txt")
    assert resp.text == "OK"


def test_band_info(client, app_settings):
    info = {"name": "La Banda", "members": ["Anna", "Pau"]}
    with open(app_settings.BAND_INFO_PATH, "w", encoding="utf-8") as fh:
        json.dump(info, fh)
    assert client.get("/api/band-info").json() == info


def test_band_info_missing_file(client):
    resp = client.get("/api/band-info")
    assert resp.status_code == 500
    assert resp.json() == {"error": "server_error", "message": "Failed to load band information"}


def test_security_headers(client):
    resp = client.get("/api/tours")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "Content-Security-Policy" not in resp.headers

    page = client.get("/admin", params={"password": ADMIN_PASSWORD})
    assert "default-src 'self'" in page.headers["Content-Security-Policy"]


def test_request_id_is_echoed(client):
    resp = client.get("/api/tours", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
    assert client.get("/api/tours").headers["X-Request-ID"]


def test_unknown_route_uses_error_shape(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"
