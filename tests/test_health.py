from fastapi.testclient import TestClient

from app.main import app
from app.routes import health
from app.services import report_service


def test_root(client):
    body = client.get("/").json()
    assert body["service"] == "Community Help API"
    assert body["status"] == "running"


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_database_health(client):
    body = client.get("/health/db").json()
    assert body["connected"] is True
    assert body["database"] == "firestore-mock"


def test_database_health_failure(client, monkeypatch):
    def broken_db():
        raise RuntimeError("credentials missing")

    monkeypatch.setattr(health, "get_db", broken_db)
    resp = client.get("/health/db")
    assert resp.status_code == 503
    assert "credentials missing" in resp.json()["detail"]


def test_unhandled_errors_become_500(act_as, citizen, monkeypatch):
    def explode(self, user_id):
        raise RuntimeError("boom")

    monkeypatch.setattr(report_service.ReportService, "get_user_reports", explode)
    act_as(citizen)
    resp = TestClient(app, raise_server_exceptions=False).get("/reports/mine")
    assert resp.status_code == 500


def test_readiness(client, monkeypatch):
    monkeypatch.setattr(health.settings, "CLOUDINARY_CLOUD_NAME", None)
    body = client.get("/health/ready").json()

    assert body["ready"] is True
    assert body["checks"]["database"] is True
    assert body["checks"]["image_uploads"] is False
    assert body["checks"]["password_sign_in"] is True


def test_readiness_fails_without_database(client, monkeypatch):
    def broken_db():
        raise RuntimeError("credentials missing")

    monkeypatch.setattr(health, "get_db", broken_db)
    resp = client.get("/health/ready")
    assert resp.status_code == 503
    assert resp.json()["detail"]["checks"]["database"] is False
