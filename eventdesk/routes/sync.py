"""Sync routes for triggering and monitoring event sync."""
from fastapi import APIRouter, Depends

from eventdesk.core.auth import AuthContext, get_auth_context
from eventdesk.core.config import settings
from eventdesk.service.module import EventsModule, get_events_module

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("/now")
async def trigger_sync(
    auth: AuthContext = Depends(get_auth_context),
    module: EventsModule = Depends(get_events_module),
):
    """
    Manually trigger a sync.

    Starting a sync supersedes any sync still in flight. When the Event
    Service cannot be used, the local events are kept and the response
    says so; the request itself does not fail.
    """
    outcome = await module.sync(auth)
    return {
        "success": outcome.source != "cancelled",
        "source": outcome.source,
        "events": outcome.events,
        "error": outcome.error,
    }


@router.get("/status")
async def sync_status(module: EventsModule = Depends(get_events_module)):
    """
    Get current sync status.

    Returns whether the Event Service is configured, the sync interval and
    the outcome of the last completed sync.
    """
    return {
        "configured": module.client.enabled,
        "sync_interval_minutes": settings.sync_interval_minutes,
        **module.sync_controller.state.as_dict(),
    }
