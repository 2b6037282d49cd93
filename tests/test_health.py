from datetime import datetime

from fastapi.testclient import TestClient

from todo_api.main import create_app
from todo_api.repositories import InMemoryRepository

from .fakes import make_settings


class ClosedPoolRepository(InMemoryRepository):
    async def ping(self) -> None:
        raise RuntimeError("pool is closed")


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/api/health")
        assert res.status_code == 200
        data = res.json()
        assert set(data) == {"status", "database", "timestamp"}
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))

    def test_health_check_database_down(self, failing_client):
        res = failing_client.get("/api/health")
        assert res.status_code == 500
        data = res.json()
        assert data["status"] == "unhealthy"
        assert data["database"] == "disconnected"
        # Raw error detail is surfaced here, unlike the todo endpoints
        assert data["error"] == "connection refused"
        datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))

    def test_health_check_unexpected_error(self):
        app = create_app(settings=make_settings(), repository=ClosedPoolRepository())
        with TestClient(app) as client:
            res = client.get("/api/health")
        assert res.status_code == 500
        data = res.json()
        assert data["status"] == "unhealthy"
        assert data["database"] == "disconnected"
        assert data["error"] == "pool is closed"
        datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))
