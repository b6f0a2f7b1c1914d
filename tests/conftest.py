import os

# Must be set before app.core.settings is imported
os.environ.setdefault("USE_MOCK_DB", "true")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "demo-cloud")
os.environ.setdefault("FIREBASE_WEB_API_KEY", "test-web-api-key")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.config.firebase import get_db
from app.main import app
from app.models.report import ReportCreate
from app.models.user import UserRole
from app.services import map_service
from app.services.report_service import get_report_service
from app.services.user_service import get_user_service
from app.utils.security import get_current_user

PHOTO_URL = "https://res.cloudinary.com/demo-cloud/image/upload/v1/pothole.jpg"
PROOF_URL = "https://res.cloudinary.com/demo-cloud/image/upload/v1/fixed.jpg"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


@pytest.fixture(autouse=True)
def db():
    database = get_db()
    database.reset()
    map_service.invalidate_marker_cache()
    yield database
    database.reset()
    map_service.invalidate_marker_cache()
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def no_geocoding(monkeypatch):
    monkeypatch.setattr("app.services.report_service.reverse_geocode_location", lambda lat, lng: None)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def act_as():
    """Make subsequent requests run as the given user."""
    def _act_as(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return user
    return _act_as


def _profile(uid, name, role):
    return get_user_service().create_profile(uid, email=f"{uid}@example.com", name=name, role=role)


@pytest.fixture
def citizen():
    return _profile("citizen-1", "Maria Santos", UserRole.CITIZEN)


@pytest.fixture
def other_citizen():
    return _profile("citizen-2", "Jose Cruz", UserRole.CITIZEN)


@pytest.fixture
def admin():
    return _profile("admin-1", "Barangay Admin", UserRole.ADMIN)


@pytest.fixture
def worker():
    return _profile("worker-1", "Ramon Reyes", UserRole.WORKER)


@pytest.fixture
def other_worker():
    return _profile("worker-2", "Ana Lopez", UserRole.WORKER)


@pytest.fixture
def report_payload():
    return {
        "title": "Pothole on Rizal St",
        "description": "Deep pothole in front of the chapel, motorbikes swerving.",
        "category": "Roads",
        "location": "Rizal St, Poblacion",
        "image_url": PHOTO_URL,
        "latitude": 14.7566,
        "longitude": 120.9466,
    }


@pytest.fixture
def make_report(report_payload, db):
    """Create a report through the service; created_minutes_ago pins createdAt for ordering tests."""
    def _make(owner, created_minutes_ago=None, **overrides):
        data = dict(report_payload)
        data.update(overrides)
        report = get_report_service().create_report(owner, ReportCreate(**data))
        if created_minutes_ago is not None:
            created = datetime.now(timezone.utc) - timedelta(minutes=created_minutes_ago)
            db.collection("reports").document(report["id"]).update({"createdAt": created})
            report["createdAt"] = created
        return report
    return _make
