"""
Tests for the Digitization Finder API.
"""

import pytest
from conftest import FakeAnalyticsSource, FakeCatalog, FakeClock, FakeReportGenerator, InMemoryHistoryStore
from fastapi.testclient import TestClient

from digitization_finder.api.app import app
from digitization_finder.api.dependencies import (
    get_client_handler,
    get_history_handler,
    get_history_store,
    get_report_handler,
    get_search_handler,
)
from digitization_finder.entities import ClientRecord
from digitization_finder.handlers import ClientContextHandler, HistoryHandler, ReportHandler, SearchHandler
from digitization_finder.repositories import RedisHistoryRepository
from digitization_finder.services import AnalyticsCacheService, ClientSearchService, ReportService

USER = {"X-User-Id": "user-1"}


class Stack:
    """Handlers wired to in-memory fakes."""

    def __init__(self, catalog, analytics: FakeAnalyticsSource | None = None) -> None:
        self.analytics = analytics or FakeAnalyticsSource()
        self.catalog = FakeCatalog(catalog)
        self.generator = FakeReportGenerator()
        self.store = InMemoryHistoryStore()
        self.cache = AnalyticsCacheService(source=self.analytics, ttl=86400, clock=FakeClock())
        reports = ReportService(generator=self.generator, history=self.store)

        app.dependency_overrides[get_search_handler] = lambda: SearchHandler(ClientSearchService(self.catalog))
        app.dependency_overrides[get_client_handler] = lambda: ClientContextHandler(self.cache)
        app.dependency_overrides[get_report_handler] = lambda: ReportHandler(self.cache, reports)
        app.dependency_overrides[get_history_handler] = lambda: HistoryHandler(self.store)
        app.dependency_overrides[get_history_store] = lambda: self.store


@pytest.fixture
def stack(catalog):
    yield Stack(catalog)
    app.dependency_overrides.clear()


@pytest.fixture
def client(stack):
    """Create a test client."""
    return TestClient(app)


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Digitization Finder API"
    assert data["endpoints"]["search"] == "/api/search-client"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_unhealthy_store(client, stack):
    stack.store.health_check = lambda: False

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["detail"]["status"] == "unhealthy"


def test_search_single_match(client):
    response = client.post("/api/search-client", json={"query": "Apogem Capital"})

    assert response.status_code == 200
    data = response.json()
    assert data["match"] == "single"
    assert data["result"]["folder_id"] == "f1"
    assert data["result"]["confidence_score"] == 1.0
    assert "results" not in data


def test_search_no_match(client):
    response = client.post("/api/search-client", json={"query": "Zyxwvut"})

    assert response.status_code == 200
    assert response.json() == {
        "match": "none",
        "message": "No clients found matching 'Zyxwvut'. Try a different spelling.",
    }


def test_search_multiple_matches():
    Stack(
        [
            ClientRecord(space_id="s", space_name="S", folder_name="Acne Ventures", folder_id="a1"),
            ClientRecord(space_id="s", space_name="S", folder_name="Acmi Partners", folder_id="a2"),
        ]
    )
    try:
        response = TestClient(app).post("/api/search-client", json={"query": "acme"})
    finally:
        app.dependency_overrides.clear()

    data = response.json()
    assert data["match"] == "multiple"
    assert [item["folder_id"] for item in data["results"]] == ["a2", "a1"]


@pytest.mark.parametrize("query", ["a", "  ", "x "])
def test_search_query_too_short(client, query):
    response = client.post("/api/search-client", json={"query": query})
    assert response.status_code == 400


def test_search_empty_catalog():
    Stack([])
    try:
        response = TestClient(app).post("/api/search-client", json={"query": "Apogem"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500


def test_get_client(client):
    assert client.get("/api/clients/f2").json()["folder_name"] == "Apex Holdings"
    assert client.get("/api/clients/missing").status_code == 404


def test_client_context_is_cached(client, stack):
    first = client.get("/api/client-context", params={"folderName": "Apogem"})
    second = client.get("/api/client-context", params={"folderName": "Apogem"})

    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["time_range"] == "current_year"
    assert body["data"]["project_counts"]["new_build_count"] == 3
    assert second.json()["data"] == body["data"]
    assert len(stack.analytics.queries) == 4


def test_client_context_invalid_time_range(client):
    response = client.get("/api/client-context", params={"folderName": "Apogem", "timeRange": "forever"})
    assert response.status_code == 422


def test_client_context_upstream_failure(catalog):
    Stack(catalog, analytics=FakeAnalyticsSource(fail_on="LIMIT"))
    try:
        response = TestClient(app).get("/api/client-context", params={"folderName": "Apogem"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502
    assert "recent_activities" in response.json()["detail"]


def test_client_context_malformed_rows(catalog):
    class BadMetrics(FakeAnalyticsSource):
        async def execute(self, query):
            rows = await super().execute(query)
            return [{"avg_effort_new_form": "lots"}] if "avg_effort_new_form" in query else rows

    Stack(catalog, analytics=BadMetrics())
    try:
        response = TestClient(app).get("/api/client-context", params={"folderName": "Apogem"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502
    assert "performance_metrics" in response.json()["detail"]


def test_lifespan_closes_clients(monkeypatch):
    closed = []
    monkeypatch.setattr(RedisHistoryRepository, "close", lambda self: closed.append("redis"))

    with TestClient(app):
        assert app.state.history_store is not None

    assert closed == ["redis"]
    assert not hasattr(app.state, "history_store")
    assert not hasattr(app.state, "http_client")


def test_cache_stats_and_invalidation(client):
    client.get("/api/client-context", params={"folderName": "Apogem"})
    client.get("/api/client-context", params={"folderName": "Apogem", "timeRange": "all_time"})

    assert client.get("/api/client-context/cache").json() == {"total_entries": 2, "ttl_seconds": 86400}

    response = client.delete("/api/client-context/cache", params={"folderName": "Apogem"})
    assert response.json()["deleted_count"] == 2

    response = client.delete("/api/client-context/cache")
    assert response.json() == {"success": True, "deleted_count": 0, "message": "Cache cleared successfully"}


def test_generate_report_saves_history(client, stack):
    response = client.post(
        "/api/generate-report",
        json={"folderName": "Apogem", "folderId": "f1", "reportType": "quick"},
        headers=USER,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["report"] == stack.generator.reply
    assert data["saved"] is True
    assert data["metadata"]["data_points"]["basic_info"] == 1
    assert stack.generator.calls[0][1] == 150

    reports = client.get("/api/reports", headers=USER).json()["items"]
    assert reports[0]["client_name"] == "Apogem"
    assert reports[0]["file_name"] == "Apogem_client_report.txt"


def test_generate_report_anonymous_is_not_saved(client):
    response = client.post("/api/generate-report", json={"folderName": "Apogem", "folderId": "f1"})

    assert response.status_code == 200
    assert response.json()["saved"] is False


def test_generate_report_rejects_unknown_type(client):
    response = client.post("/api/generate-report", json={"folderName": "Apogem", "reportType": "long"})
    assert response.status_code == 422


def test_user_endpoints_require_user(client):
    assert client.get("/api/reports").status_code == 401
    assert client.get("/api/search-history").status_code == 401


def test_search_history(client):
    for folder_id, name in [("f1", "Apogem"), ("f2", "Apex Holdings"), ("f1", "Apogem")]:
        response = client.post(
            "/api/search-history",
            json={"clientFolderId": folder_id, "clientName": name},
            headers=USER,
        )
        assert response.status_code == 200

    items = client.get("/api/search-history", headers=USER).json()["items"]
    assert [item["client_folder_id"] for item in items] == ["f1", "f2"]


def test_client_notes(client):
    assert client.get("/api/client-notes", params={"clientFolderId": "f1"}, headers=USER).status_code == 404

    response = client.post(
        "/api/client-notes",
        json={"clientFolderId": "f1", "note": "Prefers Blueprint"},
        headers=USER,
    )
    assert response.status_code == 200

    note = client.get("/api/client-notes", params={"clientFolderId": "f1"}, headers=USER).json()
    assert note["note"] == "Prefers Blueprint"
