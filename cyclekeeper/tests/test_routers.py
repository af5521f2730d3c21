"""Tests for the HTTP surface: routing, status codes and error mapping."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from cyclekeeper.main import create_app
from cyclekeeper.services.local_cache import LocalCache
from cyclekeeper.sync.coordinator import ADVISORY_LOCAL_ONLY, SyncCoordinator

JAN = {"startDate": "2024-01-01", "endDate": "2024-01-05", "flow": "heavy"}


@pytest.fixture
def client(local_coordinator: SyncCoordinator) -> TestClient:
    """Client without the lifespan hook; the coordinator is wired by hand."""
    app = create_app()
    app.state.coordinator = local_coordinator
    return TestClient(app)


def _path_id(body: dict) -> str:
    cycle_id = body["id"]
    if cycle_id["kind"] == "local":
        return f"local:{cycle_id['timestamp']}"
    return cycle_id["value"]


class TestCycleEndpoints:
    def test_create_then_list(self, client: TestClient) -> None:
        response = client.post("/api/v1/cycles", json=JAN)
        assert response.status_code == 201
        body = response.json()
        assert body["length"] == 5
        assert body["flow"] == "heavy"
        assert body["pendingSync"] is True
        assert body["id"]["kind"] == "local"

        listed = client.get("/api/v1/cycles").json()
        assert [c["startDate"] for c in listed] == ["2024-01-01"]

    def test_end_before_start_is_422(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/cycles", json={"startDate": "2024-01-05", "endDate": "2024-01-01"}
        )
        assert response.status_code == 422
        assert "End date" in response.json()["detail"]

    def test_unparseable_date_is_422(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/cycles", json={"startDate": "not a date", "endDate": "2024-01-01"}
        )
        assert response.status_code == 422

    def test_update_by_local_identifier(self, client: TestClient) -> None:
        created = client.post("/api/v1/cycles", json=JAN).json()
        response = client.put(
            f"/api/v1/cycles/{_path_id(created)}",
            json={"startDate": "2024-01-01", "endDate": "2024-01-07"},
        )
        assert response.status_code == 200
        assert response.json()["length"] == 7
        assert response.json()["id"] == created["id"]

    def test_update_unknown_is_404(self, client: TestClient) -> None:
        response = client.put("/api/v1/cycles/nope", json=JAN)
        assert response.status_code == 404

    def test_delete(self, client: TestClient) -> None:
        created = client.post("/api/v1/cycles", json=JAN).json()
        response = client.delete(f"/api/v1/cycles/{_path_id(created)}")
        assert response.status_code == 204
        assert client.get("/api/v1/cycles").json() == []

    def test_delete_unknown_is_204(self, client: TestClient) -> None:
        assert client.delete("/api/v1/cycles/local:1").status_code == 204

    def test_list_keeps_records_after_failed_cache_write(
        self, client: TestClient, cache: LocalCache
    ) -> None:
        cache.save_snapshot = AsyncMock(side_effect=OSError("disk full"))
        client.post("/api/v1/cycles", json=JAN)

        listed = client.get("/api/v1/cycles").json()

        assert [c["startDate"] for c in listed] == ["2024-01-01"]
        assert "disk full" in client.get("/api/v1/status").json()["lastAdvisory"]

    def test_reload_reads_storage(
        self, client: TestClient, local_coordinator: SyncCoordinator
    ) -> None:
        client.post("/api/v1/cycles", json=JAN)
        local_coordinator.reset()
        assert client.get("/api/v1/cycles").json() == []

        response = client.post("/api/v1/cycles/reload")

        assert response.status_code == 200
        assert [c["startDate"] for c in response.json()] == ["2024-01-01"]


class TestDerivedEndpoints:
    def test_statistics_empty_is_null(self, client: TestClient) -> None:
        response = client.get("/api/v1/cycles/statistics")
        assert response.status_code == 200
        assert response.json() is None

    def test_statistics_and_trend(self, client: TestClient) -> None:
        client.post("/api/v1/cycles", json=JAN)
        client.post("/api/v1/cycles", json={"startDate": "2024-01-30", "endDate": "2024-02-03"})

        stats = client.get("/api/v1/cycles/statistics").json()
        assert stats["totalCycles"] == 2
        assert stats["avgInterval"] == 24.0
        assert stats["isIrregular"] is False

        trend = client.get("/api/v1/cycles/trend").json()
        assert [p["intervalBefore"] for p in trend] == [None, 24]
        assert trend[1]["totalLength"] == 29
        assert trend[0]["startDate"] == "2024-01-01"

    def test_vocabulary(self, client: TestClient) -> None:
        body = client.get("/api/v1/cycles/vocabulary").json()
        assert "cramps" in body["symptoms"]
        assert "cravings" in body["preSymptoms"]
        assert body["flowLabels"] == {"light": "Light", "normal": "Normal", "heavy": "Heavy"}

    def test_export_download(self, client: TestClient) -> None:
        client.post("/api/v1/cycles", json=JAN)
        response = client.get("/api/v1/cycles/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert 'filename="cycles-' in response.headers["content-disposition"]
        assert response.json()[0]["startDate"] == "2024-01-01"

    def test_sync_skipped_in_local_mode(self, client: TestClient) -> None:
        response = client.post("/api/v1/cycles/sync")
        assert response.status_code == 200
        assert response.json()["skipped"] is True


class TestStatusEndpoints:
    def test_status_reports_local_mode(self, client: TestClient) -> None:
        client.post("/api/v1/cycles", json=JAN)
        body = client.get("/api/v1/status").json()
        assert body["mode"] == "local"
        assert body["remoteConfigured"] is False
        assert body["pendingCount"] == 1
        assert body["lastAdvisory"] == ADVISORY_LOCAL_ONLY

    def test_connectivity_toggle(self, client: TestClient) -> None:
        body = client.put("/api/v1/status/connectivity", json={"online": False}).json()
        assert body["online"] is False

    def test_health(self, client: TestClient) -> None:
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["syncMode"] == "local"

    def test_uninitialized_is_503(self) -> None:
        client = TestClient(create_app())
        assert client.get("/api/v1/cycles").status_code == 503
