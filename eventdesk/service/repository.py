"""Write paths for events: remote-preferred with a local fallback.

``RemoteEventRepository`` sends writes to the Event Service and mirrors
the service's answer into the store. ``LocalEventRepository`` writes to
the store directly. ``FallbackEventRepository`` composes the two: it
tries the remote path and, when ``should_fall_back`` says the failure is
an availability problem, repeats the write locally.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Literal, Protocol, TypeVar
from uuid import UUID

from eventdesk.core.auth import AuthContext
from eventdesk.core.cancellation import CancellationToken
from eventdesk.core.errors import RemoteServiceError
from eventdesk.models import (
    Event,
    EventCreate,
    EventUpdate,
    RegistrantInput,
    Registration,
    RegistrationStatus,
)
from eventdesk.service.client import EventServiceClient
from eventdesk.service.dates import Clock, local_now
from eventdesk.service.store import EventStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Written(Generic[T]):
    """A committed write and where it was committed."""
    value: T
    source: Literal["remote", "local"]
    notice: str | None = None


class EventRepository(Protocol):
    async def create(
        self, auth: AuthContext, draft: EventCreate, token: CancellationToken
    ) -> Written[Event]: ...

    async def update(
        self,
        auth: AuthContext,
        event_id: UUID,
        changes: EventUpdate,
        token: CancellationToken,
        *,
        expected_updated_at: datetime | None = None,
        override_status: bool = False,
    ) -> Written[Event]: ...

    async def delete(
        self, auth: AuthContext, event_id: UUID, token: CancellationToken
    ) -> Written[Event]: ...

    async def register(
        self,
        auth: AuthContext,
        event_id: UUID,
        registrant: RegistrantInput,
        token: CancellationToken,
    ) -> Written[Registration]: ...


def should_fall_back(error: Exception) -> bool:
    """Failures that mean "the service is not available", not "the request is wrong".

    Missing or rejected credentials, network failures and server errors
    all qualify. Validation and not-found answers from the service do not:
    repeating those writes locally would hide a real problem.
    """
    return isinstance(error, RemoteServiceError)


class LocalEventRepository:
    """Writes straight to the in-memory store."""

    def __init__(self, store: EventStore, clock: Clock = local_now) -> None:
        self.store = store
        self._clock = clock

    async def create(self, auth, draft, token) -> Written[Event]:
        token.raise_if_cancelled("before commit")
        return Written(self.store.create(draft), "local")

    async def update(
        self, auth, event_id, changes, token, *, expected_updated_at=None, override_status=False
    ) -> Written[Event]:
        token.raise_if_cancelled("before commit")
        event = self.store.update(
            event_id,
            changes,
            expected_updated_at=expected_updated_at,
            override_status=override_status,
        )
        return Written(event, "local")

    async def delete(self, auth, event_id, token) -> Written[Event]:
        token.raise_if_cancelled("before commit")
        return Written(self.store.delete(event_id), "local")

    async def register(self, auth, event_id, registrant, token) -> Written[Registration]:
        token.raise_if_cancelled("before commit")
        registration = Registration(
            event_id=event_id,
            **registrant.model_dump(),
            registered_at=self._clock(),
            status=RegistrationStatus.CONFIRMED,
        )
        return Written(self.store.append_registration(registration), "local")


class RemoteEventRepository:
    """Writes through the Event Service, then mirrors the result locally.

    Every write is validated against the store first, so a request the
    local path would reject never reaches the service.
    """

    def __init__(self, client: EventServiceClient, store: EventStore) -> None:
        self.client = client
        self.store = store

    async def create(self, auth, draft, token) -> Written[Event]:
        self.store.preview_create(draft)
        created = await token.run(self.client.create_event(auth, draft))
        token.raise_if_cancelled("before commit")
        return Written(self.store.upsert(created), "remote")

    async def update(
        self, auth, event_id, changes, token, *, expected_updated_at=None, override_status=False
    ) -> Written[Event]:
        self.store.preview_update(
            event_id,
            changes,
            expected_updated_at=expected_updated_at,
            override_status=override_status,
        )
        updated = await token.run(self.client.update_event(auth, event_id, changes))
        token.raise_if_cancelled("before commit")
        return Written(self.store.upsert(updated), "remote")

    async def delete(self, auth, event_id, token) -> Written[Event]:
        self.store.get(event_id)
        await token.run(self.client.delete_event(auth, event_id))
        token.raise_if_cancelled("before commit")
        return Written(self.store.delete(event_id), "remote")

    async def register(self, auth, event_id, registrant, token) -> Written[Registration]:
        self.store.get(event_id)
        registration = await token.run(self.client.register_for_event(auth, event_id, registrant))
        token.raise_if_cancelled("before commit")
        return Written(self.store.append_registration(registration), "remote")


class FallbackEventRepository:
    """Remote-first writes that degrade to the local store.

    Events created locally while the service was unavailable are unknown
    to the service, so later writes to them go straight to the local path.
    """

    def __init__(
        self,
        primary: RemoteEventRepository,
        fallback: LocalEventRepository,
        should_fall_back: Callable[[Exception], bool] = should_fall_back,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.should_fall_back = should_fall_back
        self._local_only: set[UUID] = set()

    def is_local_only(self, event_id: UUID) -> bool:
        if event_id in self._local_only and event_id not in self.fallback.store:
            self._local_only.discard(event_id)
        return event_id in self._local_only

    async def _attempt(self, name: str, auth: AuthContext, remote_call, local_call, skip_remote=False):
        if not skip_remote and auth.is_valid and self.primary.client.enabled:
            try:
                return await remote_call()
            except Exception as e:
                if not self.should_fall_back(e):
                    raise
                reason = str(e)
                logger.info(f"Remote {name} failed, writing locally: {reason}")
        elif skip_remote:
            reason = "event exists only locally"
        elif not self.primary.client.enabled:
            reason = "Event Service not configured"
        else:
            reason = "no valid credential"

        written = await local_call()
        return Written(written.value, "local", notice=f"Saved locally ({reason})")

    async def create(self, auth, draft, token) -> Written[Event]:
        written = await self._attempt(
            "create",
            auth,
            lambda: self.primary.create(auth, draft, token),
            lambda: self.fallback.create(auth, draft, token),
        )
        if written.source == "local":
            self._local_only.add(written.value.id)
        return written

    async def update(
        self, auth, event_id, changes, token, *, expected_updated_at=None, override_status=False
    ) -> Written[Event]:
        options = {"expected_updated_at": expected_updated_at, "override_status": override_status}
        return await self._attempt(
            "update",
            auth,
            lambda: self.primary.update(auth, event_id, changes, token, **options),
            lambda: self.fallback.update(auth, event_id, changes, token, **options),
            skip_remote=self.is_local_only(event_id),
        )

    async def delete(self, auth, event_id, token) -> Written[Event]:
        written = await self._attempt(
            "delete",
            auth,
            lambda: self.primary.delete(auth, event_id, token),
            lambda: self.fallback.delete(auth, event_id, token),
            skip_remote=self.is_local_only(event_id),
        )
        self._local_only.discard(event_id)
        return written

    async def register(self, auth, event_id, registrant, token) -> Written[Registration]:
        return await self._attempt(
            "registration",
            auth,
            lambda: self.primary.register(auth, event_id, registrant, token),
            lambda: self.fallback.register(auth, event_id, registrant, token),
            skip_remote=self.is_local_only(event_id),
        )
