"""
Tests for the tracking API (POST /pageview, POST /event).
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.time_local import FrozenTimeAdapter
from src.api.deps import get_ingestion_service
from src.api.routes.analytics_ingest import router
from src.components.analytics import AnalyticsIngestionService, InMemoryEventStore
from src.core.ports.storage import StoreIOError

# --- Test Client Setup ---


@pytest.fixture
def client(ingestion: AnalyticsIngestionService) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_ingestion_service] = lambda: ingestion
    return TestClient(app)


def _client_for(service: AnalyticsIngestionService) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_ingestion_service] = lambda: service
    return TestClient(app)


# --- Pageviews ---


class TestPageview:
    def test_tracked(self, client: TestClient, event_store: InMemoryEventStore) -> None:
        response = client.post(
            "/pageview",
            json={
                "visitorId": "v1",
                "sessionId": "s1",
                "page": "/profil",
                "screenWidth": 390,
                "language": "id",
            },
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Pageview tracked"}

        doc = event_store.get_document()
        assert doc.pageviews[0].page == "/profil"
        assert doc.visitors[0].language == "id"

    def test_duplicate_is_still_success(
        self, client: TestClient, event_store: InMemoryEventStore
    ) -> None:
        body = {"visitorId": "v1", "sessionId": "s1", "page": "/"}
        client.post("/pageview", json=body)
        response = client.post("/pageview", json=body)

        assert response.status_code == 200
        assert response.json()["message"] == "Duplicate skipped"
        assert len(event_store.get_document().pageviews) == 1

    def test_missing_visitor_id(self, client: TestClient) -> None:
        response = client.post("/pageview", json={"page": "/"})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "visitorId is required",
            "errors": [
                {
                    "code": "visitor_id_required",
                    "message": "visitorId is required",
                    "field": "visitorId",
                }
            ],
        }

    def test_user_agent_header_fallback(
        self, client: TestClient, event_store: InMemoryEventStore
    ) -> None:
        client.post(
            "/pageview",
            json={"visitorId": "v1"},
            headers={"User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0) Mobile"},
        )

        visitor = event_store.get_document().visitors[0]
        assert visitor.device_type == "mobile"
        assert "iPhone" in visitor.user_agent

    def test_snake_case_fields_accepted(
        self, client: TestClient, event_store: InMemoryEventStore
    ) -> None:
        response = client.post("/pageview", json={"visitor_id": "v1", "page": "/"})
        assert response.status_code == 200
        assert event_store.get_document().pageviews[0].visitor_id == "v1"


# --- Events ---


class TestEvent:
    def test_tracked(self, client: TestClient, event_store: InMemoryEventStore) -> None:
        response = client.post(
            "/event",
            json={
                "visitorId": "v1",
                "eventName": "language_change",
                "eventData": {"from": "id", "to": "en"},
            },
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Event tracked"
        event = event_store.get_document().events[0]
        assert event.event_data == {"from": "id", "to": "en"}

    def test_missing_both_fields_reports_both(self, client: TestClient) -> None:
        response = client.post("/event", json={})

        assert response.status_code == 400
        codes = [e["code"] for e in response.json()["errors"]]
        assert codes == ["visitor_id_required", "event_name_required"]

    def test_events_never_deduplicated(
        self, client: TestClient, event_store: InMemoryEventStore
    ) -> None:
        body = {"visitorId": "v1", "eventName": "click", "eventData": {"element": "logo"}}
        client.post("/event", json=body)
        client.post("/event", json=body)
        assert len(event_store.get_document().events) == 2


# --- Store Failures ---


class TestStoreFailures:
    def test_write_failure_is_500(self, clock: FrozenTimeAdapter) -> None:
        service = AnalyticsIngestionService(
            event_store=InMemoryEventStore(fail_writes=True), time_port=clock
        )
        response = _client_for(service).post("/pageview", json={"visitorId": "v1"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to store analytics data"}

    def test_busy_store_is_503(self, clock: FrozenTimeAdapter) -> None:
        class BusyStore(InMemoryEventStore):
            def read(self):  # type: ignore[override]
                raise StoreIOError("Analytics store is busy", code="store_busy")

        service = AnalyticsIngestionService(event_store=BusyStore(), time_port=clock)
        response = _client_for(service).post(
            "/event", json={"visitorId": "v1", "eventName": "click"}
        )

        assert response.status_code == 503
