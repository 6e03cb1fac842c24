"""Capacity-aware event registration."""
import asyncio
import logging
from collections import defaultdict
from uuid import UUID

from eventdesk.core.auth import AuthContext
from eventdesk.core.cancellation import CancellationToken
from eventdesk.core.config import settings
from eventdesk.core.errors import (
    CapacityExceededError,
    PreconditionFailedError,
    ValidationError,
)
from eventdesk.models import Event, RegistrantInput, Registration, RegistrationStatus
from eventdesk.service.dates import Clock, local_now
from eventdesk.service.repository import EventRepository, Written
from eventdesk.service.store import EventStore

logger = logging.getLogger(__name__)


class RegistrationManager:
    """Signs people up for events that require registration.

    Registrations for the same event are serialized with a per-event lock,
    so the capacity check and the commit cannot be split by another
    registration for that event while the remote call is in flight.
    Different events proceed independently.
    """

    def __init__(
        self,
        store: EventStore,
        repository: EventRepository,
        clock: Clock = local_now,
        enforce_capacity: bool | None = None,
    ) -> None:
        self.store = store
        self.repository = repository
        self._clock = clock
        self.enforce_capacity = (
            settings.enforce_capacity if enforce_capacity is None else enforce_capacity
        )
        self._locks: defaultdict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    def check_preconditions(self, event: Event, registrant: RegistrantInput) -> None:
        if not registrant.email.strip():
            raise ValidationError("Registrant email is required", field="email")

        if not event.registration_required:
            raise PreconditionFailedError(f"Registration is not required for {event.event_id}")

        today = self._clock().date()
        if event.registration_deadline is not None and event.registration_deadline < today:
            raise PreconditionFailedError(
                f"Registration deadline for {event.event_id} passed on "
                f"{event.registration_deadline.isoformat()}"
            )

        registrations = self.store.registrations(event.id)
        email = registrant.email.strip().lower()
        if any(
            reg.email.lower() == email and reg.status != RegistrationStatus.CANCELLED
            for reg in registrations
        ):
            raise PreconditionFailedError(f"{registrant.email} is already registered")

        if self.enforce_capacity and event.has_capacity_limit:
            confirmed = sum(1 for reg in registrations if reg.status == RegistrationStatus.CONFIRMED)
            if confirmed >= event.max_attendees:
                raise CapacityExceededError(event.event_id, event.max_attendees)

    async def register(
        self,
        auth: AuthContext,
        key: UUID | str,
        registrant: RegistrantInput,
        token: CancellationToken,
    ) -> Written[Registration]:
        event = self.store.get(key)
        async with self._locks[event.id]:
            # Re-read under the lock: an earlier registration may have filled it
            event = self.store.get(event.id)
            self.check_preconditions(event, registrant)
            written = await self.repository.register(auth, event.id, registrant, token)
        logger.info(f"Registered {registrant.email} for {event.event_id} ({written.source})")
        return written

    def cancel(self, key: UUID | str, registration_id: UUID) -> Registration:
        """Cancel a registration, freeing its place."""
        return self.store.set_registration_status(key, registration_id, RegistrationStatus.CANCELLED)

    def registrations_for(self, key: UUID | str) -> list[Registration]:
        """Registrations for one event, newest first."""
        return sorted(self.store.registrations(key), key=lambda r: r.registered_at, reverse=True)
