"""Registration routes for signing people up to events."""
from uuid import UUID

from fastapi import APIRouter, Depends

from eventdesk.core.auth import AuthContext, get_auth_context
from eventdesk.models import RegistrantInput
from eventdesk.routes.errors import unwrap
from eventdesk.service.module import EventsModule, get_events_module

router = APIRouter(prefix="/events/{event_id}/registrations", tags=["registrations"])


@router.get("")
async def list_registrations(event_id: str, module: EventsModule = Depends(get_events_module)):
    """Registrations for the event, newest first."""
    registrations = unwrap(module.list_registrations(event_id))
    return {"success": True, "data": [r.model_dump(mode="json") for r in registrations]}


@router.post("", status_code=201)
async def register(
    event_id: str,
    registrant: RegistrantInput,
    auth: AuthContext = Depends(get_auth_context),
    module: EventsModule = Depends(get_events_module),
):
    """
    Register for an event.

    Returns 400 if the event does not take registrations, the deadline has
    passed or the email is already registered, and 409 if the event is full.
    """
    result = await module.register(auth, event_id, registrant)
    registration = unwrap(result)
    body = {"success": True, "data": registration.model_dump(mode="json")}
    if result.notice:
        body["notice"] = result.notice
    return body


@router.post("/{registration_id}/cancel")
async def cancel_registration(
    event_id: str,
    registration_id: UUID,
    module: EventsModule = Depends(get_events_module),
):
    """Cancel a registration, freeing its place."""
    registration = unwrap(await module.cancel_registration(event_id, registration_id))
    return {"success": True, "data": registration.model_dump(mode="json")}
