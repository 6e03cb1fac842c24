"""Tests for API routes."""

from datetime import timedelta

from fastapi.testclient import TestClient
from conftest import NOW, make_draft

from eventdesk.models import Event
from eventdesk.service.store import EventStore


def draft_json(**overrides):
    return make_draft(**overrides).model_dump(mode="json")


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client: TestClient):
        """Test the health endpoint returns OK."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"


class TestEventsRoutes:
    """Tests for event listing and editing."""

    def test_list_events(self, client: TestClient, sample_event: Event):
        response = client.get("/events")
        assert response.status_code == 200
        data = response.json()["data"]
        assert [e["event_id"] for e in data] == [sample_event.event_id]

    def test_list_filters(self, client: TestClient, store: EventStore):
        store.create(make_draft(title="Youth Bible Study", category="Bible Study"))
        store.create(make_draft(title="Wedding Rehearsal", category="Wedding"))

        response = client.get("/events", params={"search": "bible", "category": "Bible Study"})

        assert [e["title"] for e in response.json()["data"]] == ["Youth Bible Study"]

    def test_event_detail_by_code(self, client: TestClient, sample_event: Event):
        response = client.get(f"/events/{sample_event.event_id}")
        assert response.status_code == 200
        assert response.json()["data"]["title"] == sample_event.title

    def test_event_detail_not_found(self, client: TestClient):
        """Test 404 for non-existent event."""
        from uuid import uuid4

        response = client.get(f"/events/{uuid4()}")
        assert response.status_code == 404

    def test_create_event(self, client: TestClient, store: EventStore):
        response = client.post("/events", json=draft_json())

        assert response.status_code == 201
        body = response.json()
        assert body["data"]["event_id"] == "EVT-2025-001"
        assert body["notice"] == "Saved locally (Event Service not configured)"
        assert len(store) == 1

    def test_create_invalid(self, client: TestClient, store: EventStore):
        response = client.post("/events", json=draft_json(title=""))
        assert response.status_code == 400
        assert len(store) == 0

    def test_update_event(self, client: TestClient, sample_event: Event):
        response = client.patch(f"/events/{sample_event.id}", json={"location": "Fellowship Hall"})
        assert response.status_code == 200
        assert response.json()["data"]["location"] == "Fellowship Hall"

    def test_stale_update_conflicts(self, client: TestClient, sample_event: Event):
        client.patch(f"/events/{sample_event.id}", json={"location": "A"})

        response = client.patch(
            f"/events/{sample_event.id}",
            params={"expected_updated_at": sample_event.updated_at.isoformat()},
            json={"location": "B"},
        )

        assert response.status_code == 409

    def test_status_change(self, client: TestClient, sample_event: Event):
        response = client.post(f"/events/{sample_event.id}/status", json={"status": "Completed"})
        assert response.json()["data"]["status"] == "Completed"

        response = client.post(f"/events/{sample_event.id}/status", json={"status": "Planned"})
        assert response.status_code == 400

        response = client.post(
            f"/events/{sample_event.id}/status", json={"status": "Planned", "override": True}
        )
        assert response.status_code == 200

    def test_delete_event(self, client: TestClient, sample_event: Event, store: EventStore):
        response = client.delete(f"/events/{sample_event.id}")
        assert response.status_code == 200
        assert len(store) == 0

    def test_upcoming(self, client: TestClient, store: EventStore):
        store.create(make_draft(title="Later", start_date=NOW.date() + timedelta(days=9)))
        store.create(make_draft(title="Sooner", start_date=NOW.date() + timedelta(days=1)))

        response = client.get("/events/upcoming", params={"limit": 1})

        assert [e["title"] for e in response.json()["data"]] == ["Sooner"]

    def test_stats_use_camel_case(self, client: TestClient, sample_event: Event):
        data = client.get("/events/stats").json()["data"]
        assert data["total"] == 1
        assert data["thisWeek"] == 1
        assert data["byStatus"] == {"Planned": 1}


class TestRegistrationRoutes:
    """Tests for registration endpoints."""

    def test_register_and_list(self, client: TestClient, registration_event: Event):
        url = f"/events/{registration_event.id}/registrations"

        response = client.post(url, json={"name": "Mary Achieng", "email": "mary@example.org"})
        assert response.status_code == 201

        listed = client.get(url).json()["data"]
        assert [r["email"] for r in listed] == ["mary@example.org"]

    def test_full_event_conflicts(self, client: TestClient, registration_event: Event):
        url = f"/events/{registration_event.id}/registrations"
        client.post(url, json={"email": "a@example.org"})
        client.post(url, json={"email": "b@example.org"})

        response = client.post(url, json={"email": "c@example.org"})

        assert response.status_code == 409

    def test_registration_not_required(self, client: TestClient, sample_event: Event):
        response = client.post(f"/events/{sample_event.id}/registrations", json={"email": "a@example.org"})
        assert response.status_code == 400

    def test_cancel(self, client: TestClient, registration_event: Event):
        url = f"/events/{registration_event.id}/registrations"
        registration = client.post(url, json={"email": "a@example.org"}).json()["data"]

        response = client.post(f"{url}/{registration['id']}/cancel")

        assert response.json()["data"]["status"] == "Cancelled"


class TestBudgetRoutes:
    """Tests for expense and budget endpoints."""

    def test_expense_updates_budget(self, client: TestClient, store: EventStore):
        event = store.create(make_draft(budget=25000, actual_cost=12000))

        response = client.post(
            f"/events/{event.id}/expenses",
            json={"description": "Flowers", "amount": 1000, "category": "decorations"},
        )
        assert response.status_code == 201

        budget = client.get(f"/events/{event.event_id}/budget").json()["data"]
        assert budget["spent"] == 13000
        assert budget["remaining"] == 12000
        assert budget["over_budget"] is False
        assert len(client.get(f"/events/{event.id}/expenses").json()["data"]) == 1

    def test_invalid_amount(self, client: TestClient, sample_event: Event):
        response = client.post(
            f"/events/{sample_event.id}/expenses", json={"description": "Refund", "amount": -5}
        )
        assert response.status_code == 400

    def test_unknown_event(self, client: TestClient):
        response = client.get("/events/EVT-2025-404/budget")
        assert response.status_code == 404

    def test_expense_categories(self, client: TestClient):
        response = client.get("/events/expense-categories")
        assert response.status_code == 200
        categories = response.json()["data"]
        assert "catering" in categories
        assert categories[-1] == "other"


class TestSyncRoutes:
    """Tests for sync endpoints."""

    def test_sync_now_without_service(self, client: TestClient):
        response = client.post("/sync/now")
        data = response.json()
        assert response.status_code == 200
        assert data["source"] == "local"
        assert data["success"] is True

    def test_sync_status(self, client: TestClient):
        client.post("/sync/now")

        data = client.get("/sync/status").json()

        assert data["configured"] is False
        assert data["last_sync_source"] == "local"
        assert data["last_sync_time"] == NOW.isoformat()
