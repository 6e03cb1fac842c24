"""Shared test fixtures."""

from datetime import datetime, time, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from eventdesk.core.auth import AuthContext
from eventdesk.main import app
from eventdesk.models import EventCategory, EventCreate
from eventdesk.service.client import EventServiceClient
from eventdesk.service.module import EventsModule, get_events_module
from eventdesk.service.store import EventStore

# Wednesday; its week runs Sunday 2025-06-08 to Saturday 2025-06-14
NOW = datetime(2025, 6, 11, 10, 0)
SERVICE_URL = "http://events.test"


class FakeClock:
    """A controllable stand-in for ``datetime.now``."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_draft(**overrides) -> EventCreate:
    fields = {
        "title": "Choir Rehearsal",
        "description": "Weekly rehearsal for the Sunday choir",
        "category": EventCategory.PRAYER_MEETING,
        "location": "Music Room",
        "organizer": "Grace Njeri",
        "start_date": NOW.date() + timedelta(days=2),
        "start_time": time(17, 0),
        "end_time": time(19, 0),
        "budget": 5000,
    }
    fields.update(overrides)
    return EventCreate(**fields)


def remote_client(handler) -> EventServiceClient:
    """Event Service client whose HTTP traffic goes to ``handler``."""
    http_client = httpx.AsyncClient(base_url=SERVICE_URL, transport=httpx.MockTransport(handler))
    return EventServiceClient(SERVICE_URL, http_client=http_client)


def undecodable_response() -> httpx.Response:
    """A 200 whose body claims gzip encoding but is not, failing on read."""
    return httpx.Response(
        200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not gzip data")
    )


def remote_event(**overrides) -> dict:
    """An event row as the Event Service serializes it."""
    row = {
        "id": "5b0f6a52-8d37-4a53-9d4e-2f3c7c1e9a01",
        "event_id": "EVT-2025-010",
        "title": "Leadership Retreat",
        "description": "Annual retreat for ministry leaders",
        "category": "Conference",
        "location": "Limuru Conference Centre",
        "organizer": "Elder Peter Otieno",
        "start_date": "2025-06-20T00:00:00.000Z",
        "end_date": "2025-06-22T00:00:00.000Z",
        "start_time": "08:00:00",
        "end_time": "16:00:00",
        "is_recurring": False,
        "recurrence_pattern": "",
        "registration_required": True,
        "max_attendees": 40,
        "registration_deadline": "2025-06-15T00:00:00.000Z",
        "budget": 120000,
        "actual_cost": 30000,
        "status": "Planned",
        "is_active": True,
        "created_at": "2025-05-01T09:00:00.000Z",
        "updated_at": "2025-05-02T09:00:00.000Z",
    }
    row.update(overrides)
    return row


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture(name="store")
def store_fixture(clock: FakeClock) -> EventStore:
    """An empty store driven by the fake clock."""
    return EventStore(clock)


@pytest.fixture(name="auth")
def auth_fixture() -> AuthContext:
    return AuthContext(token="staff-token", user_id="staff-1")


@pytest.fixture(name="module")
def module_fixture(store: EventStore, clock: FakeClock) -> EventsModule:
    """Events module with the remote service disabled and no baseline seeding."""
    return EventsModule(
        store=store,
        client=EventServiceClient(""),
        clock=clock,
        enforce_capacity=True,
        seed_baseline=False,
    )


@pytest.fixture(name="client")
def client_fixture(module: EventsModule):
    """Create a test client bound to the test events module."""

    def get_events_module_override():
        return module

    app.dependency_overrides[get_events_module] = get_events_module_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="sample_event")
def sample_event_fixture(store: EventStore):
    """A Planned event two days out, created through the store."""
    return store.create(make_draft())


@pytest.fixture(name="registration_event")
def registration_event_fixture(store: EventStore):
    """An event taking registrations with room for two."""
    return store.create(
        make_draft(
            title="Marriage Seminar",
            category=EventCategory.SEMINAR,
            registration_required=True,
            max_attendees=2,
            registration_deadline=NOW.date() + timedelta(days=1),
        )
    )
