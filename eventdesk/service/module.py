"""The events module as seen by the presentation layer.

``EventsModule`` wires the store, the write repositories, the sync
controller, the budget tracker and the registration manager together.
Reads return copies; every mutation returns an ``OperationResult``
instead of raising, so callers can render failures without crashing.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Generic, TypeVar
from uuid import UUID

from eventdesk.core.auth import AuthContext
from eventdesk.core.cancellation import CancellationToken
from eventdesk.core.config import settings
from eventdesk.core.errors import (
    EventsError,
    NotFoundError,
    OperationCancelled,
    PreconditionFailedError,
    ValidationError,
)
from eventdesk.models import (
    BudgetStatus,
    Event,
    EventCreate,
    EventStatus,
    EventUpdate,
    Expense,
    RegistrantInput,
    Registration,
    StatsSummary,
)
from eventdesk.service.budget import BudgetTracker
from eventdesk.service.client import EventServiceClient
from eventdesk.service.dates import Clock, local_now
from eventdesk.service.filters import FilterCriteria, filter_events, upcoming_events
from eventdesk.service.registration import RegistrationManager
from eventdesk.service.repository import (
    FallbackEventRepository,
    LocalEventRepository,
    RemoteEventRepository,
    Written,
)
from eventdesk.service.store import EventStore
from eventdesk.service.sync import SyncController, SyncOutcome

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures a caller is expected to show the user as-is
EXPECTED_FAILURES = (NotFoundError, PreconditionFailedError, ValidationError)


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a mutation.

    ``notice`` carries informational messages, such as a write that was
    saved locally because the Event Service was unavailable. A cancelled
    operation is neither ok nor an error.
    """
    ok: bool
    value: T | None = None
    error: EventsError | None = None
    notice: str | None = None
    cancelled: bool = False

    @classmethod
    def success(cls, value: T, notice: str | None = None) -> "OperationResult[T]":
        return cls(ok=True, value=value, notice=notice)

    @classmethod
    def failure(cls, error: EventsError) -> "OperationResult[T]":
        return cls(ok=False, error=error)


class EventsModule:
    def __init__(
        self,
        store: EventStore | None = None,
        client: EventServiceClient | None = None,
        clock: Clock = local_now,
        enforce_capacity: bool | None = None,
        seed_baseline: bool | None = None,
    ) -> None:
        self._clock = clock
        self.store = store if store is not None else EventStore(clock)
        if client is None:
            client = EventServiceClient(
                settings.event_service_url, timeout=settings.request_timeout_seconds
            )
        self.client = client
        self.repository = FallbackEventRepository(
            RemoteEventRepository(self.client, self.store),
            LocalEventRepository(self.store, clock),
        )
        self.sync_controller = SyncController(self.store, self.client, clock, seed_baseline)
        self.budget = BudgetTracker(self.store, clock)
        self.registrations = RegistrationManager(
            self.store, self.repository, clock, enforce_capacity
        )
        # asyncio.Lock wakes waiters in FIFO order, so writes reach the
        # store in the order they were invoked.
        self._write_lock = asyncio.Lock()
        self._write_tokens: set[CancellationToken] = set()

    async def aclose(self) -> None:
        self.cancel_all()
        await self.client.aclose()

    def cancel_all(self, reason: str = "shutdown") -> None:
        """Cancel every in-flight sync and write."""
        self.sync_controller.cancel_all(reason)
        for token in list(self._write_tokens):
            token.cancel(reason)

    # Reads

    @property
    def events(self) -> list[Event]:
        return self.store.all()

    @property
    def statistics(self) -> StatsSummary:
        return self.sync_controller.statistics

    def filtered(self, criteria: FilterCriteria | None = None) -> list[Event]:
        return filter_events(self.store.all(), criteria, now=self._clock())

    def upcoming(self, limit: int | None = None) -> list[Event]:
        return upcoming_events(self.store.all(), now=self._clock(), limit=limit)

    def get_event(self, key: UUID | str) -> OperationResult[Event]:
        return self._read(lambda: self.store.get(key))

    def budget_status(self, key: UUID | str) -> OperationResult[BudgetStatus]:
        return self._read(lambda: self.budget.status(key))

    def list_registrations(self, key: UUID | str) -> OperationResult[list[Registration]]:
        return self._read(lambda: self.registrations.registrations_for(key))

    def list_expenses(self, key: UUID | str) -> OperationResult[list[Expense]]:
        return self._read(lambda: self.budget.expenses(key))

    # Sync

    async def sync(self, auth: AuthContext, token: CancellationToken | None = None) -> SyncOutcome:
        return await self.sync_controller.sync(auth, token)

    # Mutations

    async def create_event(
        self, auth: AuthContext, draft: EventCreate, token: CancellationToken | None = None
    ) -> OperationResult[Event]:
        return await self._write(
            "create", token, lambda t: self.repository.create(auth, draft, t)
        )

    async def update_event(
        self,
        auth: AuthContext,
        key: UUID | str,
        changes: EventUpdate,
        expected_updated_at: datetime | None = None,
        token: CancellationToken | None = None,
    ) -> OperationResult[Event]:
        async def run(t):
            event = self.store.get(key)
            return await self.repository.update(
                auth, event.id, changes, t, expected_updated_at=expected_updated_at
            )

        return await self._write("update", token, run)

    async def change_status(
        self,
        auth: AuthContext,
        key: UUID | str,
        status: EventStatus,
        override: bool = False,
        token: CancellationToken | None = None,
    ) -> OperationResult[Event]:
        async def run(t):
            event = self.store.get(key)
            return await self.repository.update(
                auth, event.id, EventUpdate(status=status), t, override_status=override
            )

        return await self._write("status change", token, run)

    async def delete_event(
        self, auth: AuthContext, key: UUID | str, token: CancellationToken | None = None
    ) -> OperationResult[Event]:
        async def run(t):
            event = self.store.get(key)
            return await self.repository.delete(auth, event.id, t)

        return await self._write("delete", token, run)

    async def register(
        self,
        auth: AuthContext,
        key: UUID | str,
        registrant: RegistrantInput,
        token: CancellationToken | None = None,
    ) -> OperationResult[Registration]:
        return await self._write(
            "registration", token, lambda t: self.registrations.register(auth, key, registrant, t)
        )

    async def cancel_registration(
        self, key: UUID | str, registration_id: UUID
    ) -> OperationResult[Registration]:
        async def run(t):
            return Written(self.registrations.cancel(key, registration_id), "local")

        return await self._write("registration cancel", None, run)

    async def add_expense(
        self,
        key: UUID | str,
        amount: float,
        description: str,
        category: str = "other",
        spent_on: date | None = None,
        receipt_url: str | None = None,
    ) -> OperationResult[Expense]:
        async def run(t):
            expense = self.budget.record_expense(
                key, amount, description, category, spent_on, receipt_url
            )
            return Written(expense, "local")

        return await self._write("expense", None, run)

    # Internals

    def _read(self, func: Callable[[], T]) -> OperationResult[T]:
        try:
            return OperationResult.success(func())
        except EventsError as e:
            return OperationResult.failure(e)

    async def _write(
        self,
        name: str,
        token: CancellationToken | None,
        operation: Callable[[CancellationToken], Awaitable[Written[T]]],
    ) -> OperationResult[T]:
        token = token or CancellationToken(name)
        self._write_tokens.add(token)
        try:
            async with self._write_lock:
                written = await operation(token)
        except OperationCancelled as e:
            logger.debug(f"{name} discarded: {e}")
            return OperationResult(ok=False, cancelled=True)
        except EventsError as e:
            if not isinstance(e, EXPECTED_FAILURES):
                logger.error(f"{name} failed: {e}")
            return OperationResult.failure(e)
        finally:
            self._write_tokens.discard(token)

        if written.notice:
            logger.info(f"{name}: {written.notice}")
        return OperationResult.success(written.value, notice=written.notice)


_module: EventsModule | None = None


def get_events_module() -> EventsModule:
    """FastAPI dependency returning the process-wide events module."""
    global _module
    if _module is None:
        _module = EventsModule()
    return _module
