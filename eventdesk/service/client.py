"""HTTP client for the remote Event Service."""
import asyncio
import logging
from typing import Any
from uuid import UUID

import httpx
from pydantic import ValidationError as PydanticValidationError

from eventdesk.core.auth import AuthContext
from eventdesk.core.errors import (
    NotFoundError,
    ServerError,
    UnauthorizedError,
    UnreachableError,
    ValidationError,
)
from eventdesk.models import (
    Event,
    EventCreate,
    EventUpdate,
    RegistrantInput,
    Registration,
    StatsSummary,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("error") or payload.get("message")
        if isinstance(message, str) and message.strip():
            return " ".join(message.split())[:200]
    return f"HTTP {response.status_code}"


class EventServiceClient:
    """Async client for the Event Service REST API.

    Responses use the ``{"success": bool, "data": ...}`` envelope. Failures
    are raised as the core's error types:

    - no credential, 401 or 403 -> ``UnauthorizedError``
    - network error or timeout -> ``UnreachableError``
    - 404 -> ``NotFoundError``
    - 400 or 422 -> ``ValidationError``
    - any other failure -> ``ServerError``
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        auth: AuthContext,
        json: dict | None = None,
    ) -> Any:
        if not self.enabled:
            raise UnreachableError("Event Service URL not configured")
        if not auth.is_valid:
            raise UnauthorizedError("No valid credential for the Event Service")

        try:
            response = await self._http_client.request(
                method,
                path,
                json=json,
                headers={"Authorization": f"Bearer {auth.token}"},
            )
        except httpx.TimeoutException as e:
            raise UnreachableError(f"Event Service timed out: {method} {path}") from e
        except httpx.TransportError as e:
            raise UnreachableError(f"Event Service unreachable: {e}") from e
        except httpx.HTTPError as e:
            # Undecodable bodies, redirect loops
            raise ServerError(f"Event Service response unusable: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise UnauthorizedError(f"Event Service rejected credential ({status})")
        if status == 404:
            raise NotFoundError("Event Service resource", path)
        if status in (400, 422):
            raise ValidationError(_error_message(response))
        if status >= 400:
            raise ServerError(_error_message(response), status_code=status)

        try:
            payload = response.json()
        except ValueError as e:
            raise ServerError("Event Service returned invalid JSON", status_code=status) from e
        if not isinstance(payload, dict) or not payload.get("success"):
            message = payload.get("error") if isinstance(payload, dict) else None
            raise ServerError(message or "Event Service reported failure", status_code=status)
        return payload.get("data")

    async def list_events(self, auth: AuthContext) -> list[Event]:
        data = await self._request("GET", "/api/events", auth)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ServerError(f"Expected an event list, got {type(data).__name__}")
        events = []
        for row in data:
            if not isinstance(row, dict):
                logger.warning(f"Ignoring malformed event row: {row!r}")
                continue
            try:
                events.append(Event.model_validate(row))
            except PydanticValidationError as e:
                logger.warning(f"Ignoring malformed event {row.get('event_id') or row.get('id')}: {e}")
        return events

    async def get_statistics(self, auth: AuthContext) -> StatsSummary:
        data = await self._request("GET", "/api/events/stats/summary", auth)
        try:
            return StatsSummary.model_validate(data or {})
        except PydanticValidationError as e:
            raise ServerError(f"Malformed statistics payload: {e}") from e

    async def create_event(self, auth: AuthContext, draft: EventCreate) -> Event:
        data = await self._request("POST", "/api/events", auth, json=draft.model_dump(mode="json"))
        return self._parse_event(data)

    async def update_event(self, auth: AuthContext, event_id: UUID, changes: EventUpdate) -> Event:
        data = await self._request(
            "PUT",
            f"/api/events/{event_id}",
            auth,
            json=changes.model_dump(mode="json", exclude_unset=True),
        )
        return self._parse_event(data)

    async def delete_event(self, auth: AuthContext, event_id: UUID) -> bool:
        await self._request("DELETE", f"/api/events/{event_id}", auth)
        return True

    async def register_for_event(
        self, auth: AuthContext, event_id: UUID, registrant: RegistrantInput
    ) -> Registration:
        data = await self._request(
            "POST",
            f"/api/events/{event_id}/register",
            auth,
            json=registrant.model_dump(mode="json"),
        )
        if not isinstance(data, dict):
            raise ServerError("Malformed registration payload")
        try:
            return Registration.model_validate({**data, "event_id": event_id})
        except PydanticValidationError as e:
            raise ServerError(f"Malformed registration payload: {e}") from e

    async def fetch_snapshot(self, auth: AuthContext) -> tuple[list[Event], StatsSummary]:
        """Fetch the event list and statistics in parallel.

        If either call fails the other is cancelled and the error is raised.
        """
        events_task = asyncio.ensure_future(self.list_events(auth))
        stats_task = asyncio.ensure_future(self.get_statistics(auth))
        try:
            events, stats = await asyncio.gather(events_task, stats_task)
        except BaseException:
            events_task.cancel()
            stats_task.cancel()
            raise
        return events, stats

    def _parse_event(self, data: Any) -> Event:
        try:
            return Event.model_validate(data or {})
        except PydanticValidationError as e:
            raise ServerError(f"Malformed event payload: {e}") from e
