import logging

import redis
from fastapi import FastAPI
from fastapi.testclient import TestClient

from smartwater import rate_limiter
from smartwater.csrf import CSRF_COOKIE_NAME, CSRF_HEADER_NAME, CSRFMiddleware, is_path_exempt
from smartwater.main import app
from smartwater.security_headers import SecurityHeadersMiddleware


def test_root_and_health(anon):
    assert anon.get("/").json() == {"message": "SmartWater Pools API is running"}
    assert anon.get("/health").json() == {"status": "healthy"}
    assert anon.get("/api/health").json() == {"status": "healthy", "database": "connected"}


def test_csrf_token_endpoint_reuses_cookie(anon):
    response = anon.get("/csrf-token")
    token = response.json()["csrf_token"]
    assert response.cookies.get(CSRF_COOKIE_NAME) == token

    assert anon.get("/csrf-token").json() == {"csrf_token": token}


def test_validation_errors_are_serializable(admin_client):
    response = admin_client.post("/api/work-orders", json={"title": "X", "priority": "whenever"})
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "priority"]


def test_security_headers(anon):
    response = anon.get("/")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert "X-Frame-Options" not in anon.get("/health").headers


def _csrf_app():
    app = FastAPI()
    app.add_middleware(CSRFMiddleware)

    @app.post("/api/things")
    def create_thing():
        return {"ok": True}

    @app.get("/api/things")
    def list_things():
        return []

    @app.post("/api/auth/google/callback")
    def callback():
        return {"ok": True}

    return TestClient(app)


def test_csrf_rejects_missing_or_mismatched_tokens():
    client = _csrf_app()

    response = client.post("/api/things")
    assert response.status_code == 403
    assert response.json()["detail"].startswith("CSRF token missing")

    client.cookies.set(CSRF_COOKIE_NAME, "abc")
    assert client.post("/api/things").status_code == 403
    assert client.post("/api/things", headers={CSRF_HEADER_NAME: "xyz"}).status_code == 403
    assert client.post("/api/things", headers={CSRF_HEADER_NAME: "abc"}).json() == {"ok": True}


def test_csrf_sets_cookie_and_skips_safe_and_exempt_requests():
    client = _csrf_app()
    response = client.get("/api/things")
    assert response.status_code == 200
    assert response.cookies.get(CSRF_COOKIE_NAME)

    fresh = _csrf_app()
    assert fresh.post("/api/auth/google/callback").status_code == 200


def test_exempt_paths():
    assert is_path_exempt("/api/auth/google/login")
    assert is_path_exempt("/api/health")
    assert not is_path_exempt("/api/clients")


def test_security_headers_respect_exclusions():
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/skip"])

    @app.get("/skip")
    def skip():
        return {}

    @app.get("/keep")
    def keep():
        return {}

    client = TestClient(app)
    assert "Content-Security-Policy" not in client.get("/skip").headers
    assert client.get("/keep").headers["Cache-Control"] == "no-store, no-cache, must-revalidate"


def test_startup_warns_that_rate_limited_routes_fail_closed(monkeypatch, caplog):
    def unreachable():
        raise redis.ConnectionError("Connection refused")

    monkeypatch.setattr(rate_limiter, "get_redis_client", unreachable)
    with caplog.at_level(logging.WARNING, logger="smartwater.main"):
        with TestClient(app):
            pass

    assert "login and registration will return 503" in caplog.text
    assert "fail-open" not in caplog.text


def test_openapi_declares_response_models(anon):
    paths = anon.get("/openapi.json").json()["paths"]

    def success_schema(path, method, code="200"):
        return paths[path][method]["responses"][code]["content"]["application/json"]["schema"]

    assert success_schema("/api/clients", "get")["items"]["$ref"].endswith("/ClientResponse")
    assert success_schema("/api/users/{user_id}", "get")["$ref"].endswith("/UserResponse")
    assert success_schema("/api/invoices/{invoice_id}", "get")["$ref"].endswith("/InvoiceDetailResponse")
    assert success_schema("/api/work-orders", "post", "201")["$ref"].endswith("/WorkOrderResponse")
