"""Event routes for listing, editing and reporting on events."""
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from eventdesk.core.auth import AuthContext, get_auth_context
from eventdesk.models import EXPENSE_CATEGORIES, DateRange, EventCreate, EventUpdate, StatusChange
from eventdesk.routes.errors import unwrap
from eventdesk.service.filters import FilterCriteria
from eventdesk.service.module import EventsModule, get_events_module

router = APIRouter(prefix="/events", tags=["events"])


def _written(result, value):
    body = {"success": True, "data": value.model_dump(mode="json")}
    if result.notice:
        body["notice"] = result.notice
    return body


@router.get("")
async def list_events(
    search: str = "",
    category: str = "all",
    status: str = "all",
    date_range: DateRange = DateRange.ALL,
    include_inactive: bool = False,
    module: EventsModule = Depends(get_events_module),
):
    """
    List events matching the selected filters.

    All filters combine with AND. With ``date_range=upcoming`` the list is
    ordered soonest first, otherwise it keeps store order.
    """
    criteria = FilterCriteria(
        search_term=search,
        category=category,
        status=status,
        date_range=date_range,
        include_inactive=include_inactive,
    )
    events = module.filtered(criteria)
    return {"success": True, "data": [e.model_dump(mode="json") for e in events]}


@router.get("/upcoming")
async def upcoming_events(
    limit: int | None = Query(default=None, ge=1),
    module: EventsModule = Depends(get_events_module),
):
    """Active events that have not started yet, soonest first."""
    events = module.upcoming(limit)
    return {"success": True, "data": [e.model_dump(mode="json") for e in events]}


@router.get("/stats")
async def event_statistics(module: EventsModule = Depends(get_events_module)):
    """Aggregate statistics, in the Event Service's camelCase shape."""
    return {"success": True, "data": module.statistics.model_dump(mode="json", by_alias=True)}


@router.get("/expense-categories")
async def expense_categories():
    """Suggested expense categories; expenses accept any category string."""
    return {"success": True, "data": list(EXPENSE_CATEGORIES)}


@router.get("/{event_id}")
async def event_detail(event_id: str, module: EventsModule = Depends(get_events_module)):
    """Single event by internal id or external code (``EVT-2025-001``)."""
    event = unwrap(module.get_event(event_id))
    return {"success": True, "data": event.model_dump(mode="json")}


@router.post("", status_code=201)
async def create_event(
    draft: EventCreate,
    auth: AuthContext = Depends(get_auth_context),
    module: EventsModule = Depends(get_events_module),
):
    """
    Create an event.

    The write goes to the Event Service when it is reachable and falls back
    to the local store otherwise, in which case a ``notice`` is returned.
    """
    result = await module.create_event(auth, draft)
    return _written(result, unwrap(result))


@router.patch("/{event_id}")
async def update_event(
    event_id: str,
    changes: EventUpdate,
    expected_updated_at: datetime | None = None,
    auth: AuthContext = Depends(get_auth_context),
    module: EventsModule = Depends(get_events_module),
):
    """
    Apply a partial update.

    Pass ``expected_updated_at`` to reject the write with 409 if the event
    changed since it was read.
    """
    result = await module.update_event(auth, event_id, changes, expected_updated_at)
    return _written(result, unwrap(result))


@router.post("/{event_id}/status")
async def change_status(
    event_id: str,
    change: StatusChange,
    auth: AuthContext = Depends(get_auth_context),
    module: EventsModule = Depends(get_events_module),
):
    """Move an event to another lifecycle status."""
    result = await module.change_status(auth, event_id, change.status, change.override)
    return _written(result, unwrap(result))


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    auth: AuthContext = Depends(get_auth_context),
    module: EventsModule = Depends(get_events_module),
):
    """Delete an event together with its registrations and expenses."""
    result = await module.delete_event(auth, event_id)
    return _written(result, unwrap(result))
