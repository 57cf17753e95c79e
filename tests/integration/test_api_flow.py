"""
End-to-end flow through the assembled application.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.adapters.json_store import ADMIN_FILENAME, ANALYTICS_FILENAME
from src.api.main import create_app
from src.app_shell.cli import main as cli_main
from src.shell.http.health import StartupTracker


@pytest.fixture
def client(app_env: Path) -> Iterator[TestClient]:
    StartupTracker.reset()
    with TestClient(create_app(), raise_server_exceptions=False) as c:
        yield c
    StartupTracker.reset()


def test_startup_initializes_stores(client: TestClient, app_env: Path) -> None:
    assert (app_env / ANALYTICS_FILENAME).exists()
    assert (app_env / ADMIN_FILENAME).exists()

    ready = client.get("/health/ready")
    assert ready.status_code == 200
    assert {c["name"] for c in ready.json()["checks"]} == {
        "startup",
        "analytics_store",
        "admin_store",
    }


def test_health_banner(client: TestClient) -> None:
    body = client.get("/health").json()
    assert body["status"] == "OK"
    assert body["version"] == "1.0.0"


def test_unknown_route(client: TestClient) -> None:
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found", "message": "Route GET /api/nope not found"}


def test_track_then_report(client: TestClient) -> None:
    visitor = {"visitorId": "v-e2e", "sessionId": "s-e2e"}

    assert client.post("/api/track/pageview", json={**visitor, "page": "/"}).status_code == 200
    assert client.post("/api/track/pageview", json={**visitor, "page": "/"}).json()[
        "message"
    ] == "Duplicate skipped"
    assert client.post("/api/track/pageview", json={**visitor, "page": "/akademik"}).status_code == 200
    assert (
        client.post(
            "/api/track/event",
            json={**visitor, "eventName": "section_view", "eventData": {"section": "hero"}},
        ).status_code
        == 200
    )

    stats = client.get("/api/stats", params={"days": 1}).json()
    assert stats["visitors"] == 1
    assert stats["pageviews"] == 2
    assert stats["bounceRate"] == 0.0

    analytics = client.get("/api/analytics").json()
    assert analytics["totalPageViews"] == 2
    assert analytics["summary"]["totalVisitors"] == 1
    assert analytics["last30Days"]["pageviews"] == 2


def test_days_validation(client: TestClient) -> None:
    assert client.get("/api/stats", params={"days": 0}).status_code == 422
    assert client.get("/api/analytics", params={"days": 366}).status_code == 422


def test_cors_preflight(client: TestClient) -> None:
    response = client.options(
        "/api/track/pageview",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_admin_login_flow(client: TestClient) -> None:
    assert cli_main(["create-admin", "operator", "--password", "pw-123"]) == 0

    assert client.get("/api/auth/profile").status_code == 401

    login = client.post("/api/auth/login", json={"username": "operator", "password": "pw-123"})
    assert login.status_code == 200

    profile = client.get("/api/auth/profile").json()
    assert profile["admin"]["username"] == "operator"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/verify").status_code == 401
