"""Tests for the reminder HTTP API."""
import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from app.api.reminders import get_clock
from app.clock import FixedClock
from app.config import settings
from app.database import Base, get_db


PREFIX = settings.reminders_prefix


@pytest.fixture
def api_clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 3, 10, 0))


@pytest.fixture
def client(tmp_path, api_clock):
    """Create test client bound to a throwaway database and a fixed clock."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'api.db'}",
        connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: api_clock

    yield TestClient(app)

    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def auth(user_id: str = "user-1") -> dict:
    return {"X-User-Id": user_id}


def create_body(**overrides) -> dict:
    body = {
        "subject_id": "pet-1",
        "type": "feeding",
        "title": "Breakfast",
        "description": "Half a cup of kibble",
        "frequency": "daily",
        "time_of_day": "08:00:00",
    }
    body.update(overrides)
    return body


def create(client: TestClient, user_id: str = "user-1", **overrides) -> dict:
    response = client.post(PREFIX, json=create_body(**overrides), headers=auth(user_id))
    assert response.status_code == 201
    return response.json()


class TestReminderRoutes:
    """Test cases for the happy paths of every route."""

    def test_create_daily_reminder(self, client):
        data = create(client)

        assert data["user_id"] == "user-1"
        assert data["is_active"] is True
        assert data["next_occurrence_at"] == "2024-01-04T08:00:00"
        assert data["days_of_week"] is None

    def test_create_weekly_reminder(self, client):
        data = create(client, frequency="weekly", days_of_week=[5, 1], time_of_day="09:00:00")

        assert data["days_of_week"] == [1, 5]
        assert data["next_occurrence_at"] == "2024-01-05T09:00:00"

    def test_list_only_own_reminders(self, client):
        create(client, title="Mine")
        create(client, user_id="user-2", title="Theirs")

        response = client.get(PREFIX, headers=auth())

        assert response.status_code == 200
        assert [r["title"] for r in response.json()] == ["Mine"]

    def test_list_filters_and_pages(self, client):
        create(client, time_of_day="07:00:00")
        create(client, time_of_day="09:00:00")
        create(client, subject_id="pet-2", time_of_day="08:00:00")

        by_subject = client.get(PREFIX, params={"subject_id": "pet-2"}, headers=auth()).json()
        assert len(by_subject) == 1

        page = client.get(PREFIX, params={"limit": 1, "offset": 1}, headers=auth()).json()
        assert [r["subject_id"] for r in page] == ["pet-2"]

    def test_get_reminder(self, client):
        created = create(client)

        response = client.get(f"{PREFIX}/{created['id']}", headers=auth())

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_patch_reschedules(self, client):
        created = create(client)

        response = client.patch(
            f"{PREFIX}/{created['id']}",
            json={"time_of_day": "12:00:00"},
            headers=auth()
        )

        assert response.status_code == 200
        data = response.json()
        assert data["next_occurrence_at"] == "2024-01-03T12:00:00"
        assert data["title"] == "Breakfast"

    def test_toggle(self, client):
        created = create(client)

        response = client.post(
            f"{PREFIX}/{created['id']}/toggle",
            json={"is_active": False},
            headers=auth()
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False

    def test_actions_and_logs(self, client, api_clock):
        created = create(client)
        api_clock.set(datetime(2024, 1, 4, 8, 5))

        snooze = client.post(
            f"{PREFIX}/{created['id']}/actions",
            json={"status": "snoozed", "snooze_minutes": 15},
            headers=auth()
        )
        assert snooze.status_code == 201
        assert snooze.json()["snoozed_until"] == "2024-01-04T08:20:00"

        api_clock.set(datetime(2024, 1, 4, 8, 20))
        done = client.post(
            f"{PREFIX}/{created['id']}/actions",
            json={"status": "completed", "notes": "ate everything"},
            headers=auth()
        )
        assert done.status_code == 201

        reminder = client.get(f"{PREFIX}/{created['id']}", headers=auth()).json()
        assert reminder["next_occurrence_at"] == "2024-01-05T08:00:00"
        assert reminder["last_reminded_at"] == "2024-01-04T08:20:00"

        logs = client.get(f"{PREFIX}/{created['id']}/logs", headers=auth()).json()
        assert [log["status"] for log in logs] == ["completed", "snoozed"]

    def test_delete(self, client):
        created = create(client)

        response = client.delete(f"{PREFIX}/{created['id']}", headers=auth())
        assert response.status_code == 204

        missing = client.get(f"{PREFIX}/{created['id']}", headers=auth())
        assert missing.status_code == 404


class TestReminderErrors:
    """Test cases for error responses."""

    def test_missing_user_header(self, client):
        response = client.get(PREFIX)
        assert response.status_code == 401

    def test_invalid_schedule_is_bad_request(self, client):
        response = client.post(PREFIX, json=create_body(frequency="weekly"), headers=auth())

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "MISSING_FIELD"

    def test_snooze_without_minutes_is_bad_request(self, client):
        created = create(client)

        response = client.post(
            f"{PREFIX}/{created['id']}/actions",
            json={"status": "snoozed"},
            headers=auth()
        )

        assert response.status_code == 400

    def test_foreign_reminder_is_not_found(self, client):
        created = create(client)

        response = client.patch(
            f"{PREFIX}/{created['id']}",
            json={"title": "Hijacked"},
            headers=auth("user-2")
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    def test_unknown_reminder_is_not_found(self, client):
        response = client.delete(f"{PREFIX}/does-not-exist", headers=auth())
        assert response.status_code == 404

    def test_unknown_status_is_rejected(self, client):
        created = create(client)

        response = client.post(
            f"{PREFIX}/{created['id']}/actions",
            json={"status": "ignored"},
            headers=auth()
        )

        assert response.status_code == 422


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
