"""In-memory event store.

The store is the single owner of the live event set and its child
collections (registrations and expenses). Every mutation goes through it;
everything else works on the copies it hands out.
"""
import logging
import re
from collections.abc import Iterable
from datetime import datetime, timedelta
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from eventdesk.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    StaleWriteError,
    ValidationError,
)
from eventdesk.models import (
    Event,
    EventCreate,
    EventStatus,
    EventUpdate,
    Expense,
    Registration,
    RegistrationStatus,
)
from eventdesk.service.dates import Clock, local_now

logger = logging.getLogger(__name__)

CODE_PREFIX = "EVT"
_CODE_PATTERN = re.compile(rf"^{CODE_PREFIX}-(\d{{4}})-(\d+)$")

# Fields a partial update may never touch.
IMMUTABLE_FIELDS = {"id", "event_id", "created_at", "updated_at"}

TERMINAL_STATUSES = {EventStatus.COMPLETED, EventStatus.CANCELLED}


def check_transition(current: EventStatus, requested: EventStatus, override: bool = False) -> None:
    """Guard status changes.

    Every edge is allowed except moving a Completed or Cancelled event
    back to Planned, which needs an explicit staff override.
    """
    if requested == EventStatus.PLANNED and current in TERMINAL_STATUSES and not override:
        raise InvalidTransitionError(current.value, requested.value)


def validate_event(event: Event) -> None:
    """Check the invariants every stored event must satisfy."""
    if not (event.title or "").strip():
        raise ValidationError("Title is required", field="title")
    if event.start_date is None:
        raise ValidationError("Start date is required", field="start_date")
    if event.start_time is None:
        raise ValidationError("Start time is required", field="start_time")
    if event.budget < 0:
        raise ValidationError("Budget cannot be negative", field="budget")
    if event.actual_cost < 0:
        raise ValidationError("Actual cost cannot be negative", field="actual_cost")
    if event.max_attendees is not None and event.max_attendees < 0:
        raise ValidationError("Max attendees cannot be negative", field="max_attendees")
    if event.is_recurring and event.recurrence_pattern is None:
        raise ValidationError("Recurring events need a recurrence pattern", field="recurrence_pattern")
    ends_at = event.ends_at
    if ends_at is not None and ends_at < event.starts_at:
        raise ValidationError("Event cannot end before it starts", field="end_date")


class EventStore:
    """Authoritative in-memory collection of events keyed by internal id.

    Attributes:
        version: Incremented on every mutation. Derived views compare it to
            know when they are stale and must be recomputed.
    """

    def __init__(self, clock: Clock = local_now) -> None:
        self._clock = clock
        self._events: dict[UUID, Event] = {}
        self._codes: dict[str, UUID] = {}
        self._registrations: dict[UUID, list[Registration]] = {}
        self._expenses: dict[UUID, list[Expense]] = {}
        self._last_stamp: datetime | None = None
        self.version = 0

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, key) -> bool:
        return self._resolve(key) is not None

    # Reads

    def all(self) -> list[Event]:
        """Copies of every event, in insertion order."""
        return [event.model_copy() for event in self._events.values()]

    def get(self, key: UUID | str) -> Event:
        """Look up by internal id or external code."""
        event_id = self._resolve(key)
        if event_id is None:
            raise NotFoundError("Event", key)
        return self._events[event_id].model_copy()

    def registrations(self, key: UUID | str) -> list[Registration]:
        event_id = self._require(key)
        return [reg.model_copy() for reg in self._registrations.get(event_id, [])]

    def expenses(self, key: UUID | str) -> list[Expense]:
        event_id = self._require(key)
        return [exp.model_copy() for exp in self._expenses.get(event_id, [])]

    def registration_counts(self) -> dict[UUID, int]:
        """Active (not cancelled) registrations per event, in one pass."""
        return {
            event_id: sum(1 for reg in regs if reg.status != RegistrationStatus.CANCELLED)
            for event_id, regs in self._registrations.items()
        }

    def confirmed_counts(self) -> dict[UUID, int]:
        return {
            event_id: sum(1 for reg in regs if reg.status == RegistrationStatus.CONFIRMED)
            for event_id, regs in self._registrations.items()
        }

    # Mutations

    def preview_create(self, draft: EventCreate) -> Event:
        """Build and validate the event ``create`` would store, without storing it."""
        if draft.status != EventStatus.PLANNED:
            raise ValidationError("New events must start as Planned", field="status")
        now = self._clock()
        try:
            event = Event.model_validate(
                {
                    **draft.model_dump(),
                    "event_id": self._next_code(now.year),
                    "created_at": now,
                    "updated_at": now,
                }
            )
        except PydanticValidationError as e:
            raise ValidationError(str(e)) from e
        validate_event(event)
        return event

    def create(self, draft: EventCreate) -> Event:
        """Create a new Planned event from a staff draft."""
        event = self.preview_create(draft)
        now = self._stamp()
        event = event.model_copy(update={"created_at": now, "updated_at": now})

        self._put(event)
        logger.info(f"Created event {event.event_id}: {event.title}")
        return event.model_copy()

    def preview_update(
        self,
        key: UUID | str,
        changes: EventUpdate | dict,
        expected_updated_at: datetime | None = None,
        override_status: bool = False,
    ) -> Event:
        """Validate a partial update and return the merged event, without storing it.

        If ``expected_updated_at`` is given and the event has been modified
        since, the write is rejected as stale.
        """
        event_id = self._require(key)
        current = self._events[event_id]

        if expected_updated_at is not None and current.updated_at != expected_updated_at:
            raise StaleWriteError(
                f"Event {current.event_id} changed at {current.updated_at.isoformat()}"
            )

        if isinstance(changes, EventUpdate):
            fields = changes.model_dump(exclude_unset=True)
        else:
            fields = dict(changes)
        fields = {k: v for k, v in fields.items() if k not in IMMUTABLE_FIELDS}

        if fields.get("status") is not None:
            check_transition(current.status, EventStatus(fields["status"]), override_status)

        try:
            merged = Event.model_validate({**current.model_dump(), **fields})
        except PydanticValidationError as e:
            raise ValidationError(str(e)) from e
        validate_event(merged)
        return merged

    def update(
        self,
        key: UUID | str,
        changes: EventUpdate | dict,
        expected_updated_at: datetime | None = None,
        override_status: bool = False,
    ) -> Event:
        """Merge the explicitly set fields of ``changes`` into an event."""
        merged = self.preview_update(key, changes, expected_updated_at, override_status)
        merged = merged.model_copy(update={"updated_at": self._stamp(after=merged.updated_at)})

        self._events[merged.id] = merged
        self.version += 1
        logger.debug(f"Updated event {merged.event_id}")
        return merged.model_copy()

    def set_status(self, key: UUID | str, status: EventStatus, override: bool = False) -> Event:
        return self.update(key, {"status": status}, override_status=override)

    def delete(self, key: UUID | str) -> Event:
        """Remove an event and everything it owns."""
        event_id = self._require(key)
        event = self._events.pop(event_id)
        self._codes.pop(event.event_id, None)
        registrations = self._registrations.pop(event_id, [])
        expenses = self._expenses.pop(event_id, [])
        self.version += 1
        logger.info(
            f"Deleted event {event.event_id} with {len(registrations)} registrations "
            f"and {len(expenses)} expenses"
        )
        return event

    def upsert(self, event: Event) -> Event:
        """Insert or replace an event as received from the Event Service.

        The service's record wins: if its external code is held by a
        different local event, the local one is given a fresh code.
        The stored ``updated_at`` is the later of the service's value and a
        fresh local stamp, so a mirrored write never moves it backwards.
        """
        validate_event(event)
        holder = self._codes.get(event.event_id) if event.event_id else None
        if holder is not None and holder != event.id:
            self._recode(holder)

        previous = self._events.get(event.id)
        if previous is not None and previous.event_id != event.event_id:
            self._codes.pop(previous.event_id, None)
        stamp = self._stamp(after=previous.updated_at if previous is not None else None)
        if event.updated_at > stamp:
            stamp = self._last_stamp = event.updated_at
        event = event.model_copy(update={"updated_at": stamp})
        if not event.event_id:
            event = event.model_copy(update={"event_id": self._next_code(event.created_at.year)})

        self._put(event)
        return event.model_copy()

    def replace_all(self, events: Iterable[Event]) -> int:
        """Atomically swap in a new event set.

        Records that fail validation or repeat an external code are skipped
        and logged. Child collections survive for events whose id is still
        present. The new indices are built aside and swapped in at the end.
        """
        new_events: dict[UUID, Event] = {}
        new_codes: dict[str, UUID] = {}
        for event in events:
            try:
                validate_event(event)
            except ValidationError as e:
                logger.warning(f"Skipping invalid event {event.event_id or event.id}: {e}")
                continue
            if event.id in new_events or (event.event_id and event.event_id in new_codes):
                logger.warning(f"Skipping duplicate event {event.event_id or event.id}")
                continue
            new_events[event.id] = event
            if event.event_id:
                new_codes[event.event_id] = event.id

        self._events = new_events
        self._codes = new_codes
        self._registrations = {k: v for k, v in self._registrations.items() if k in new_events}
        self._expenses = {k: v for k, v in self._expenses.items() if k in new_events}
        for event_id, event in list(self._events.items()):
            if not event.event_id:
                self._recode(event_id)
        self.version += 1
        return len(new_events)

    def append_registration(self, registration: Registration) -> Registration:
        self._require(registration.event_id)
        self._registrations.setdefault(registration.event_id, []).append(registration)
        self.version += 1
        return registration.model_copy()

    def set_registration_status(
        self, key: UUID | str, registration_id: UUID, status: RegistrationStatus
    ) -> Registration:
        event_id = self._require(key)
        regs = self._registrations.get(event_id, [])
        for index, reg in enumerate(regs):
            if reg.id == registration_id:
                updated = reg.model_copy(update={"status": status})
                regs[index] = updated
                self.version += 1
                return updated.model_copy()
        raise NotFoundError("Registration", registration_id)

    def append_expense(self, expense: Expense) -> Event:
        """Record an expense and add its amount to the event's actual cost."""
        event_id = self._require(expense.event_id)
        event = self._events[event_id]
        updated = event.model_copy(
            update={
                "actual_cost": event.actual_cost + expense.amount,
                "updated_at": self._stamp(after=event.updated_at),
            }
        )
        self._expenses.setdefault(event_id, []).append(expense)
        self._events[event_id] = updated
        self.version += 1
        return updated.model_copy()

    # Internals

    def _resolve(self, key) -> UUID | None:
        if isinstance(key, UUID):
            return key if key in self._events else None
        if isinstance(key, str):
            if key in self._codes:
                return self._codes[key]
            try:
                parsed = UUID(key)
            except ValueError:
                return None
            return parsed if parsed in self._events else None
        return None

    def _require(self, key) -> UUID:
        event_id = self._resolve(key)
        if event_id is None:
            raise NotFoundError("Event", key)
        return event_id

    def _put(self, event: Event) -> None:
        self._events[event.id] = event
        self._codes[event.event_id] = event.id
        self.version += 1

    def _recode(self, event_id: UUID) -> None:
        event = self._events[event_id]
        code = self._next_code(event.created_at.year)
        if self._codes.get(event.event_id) == event_id:
            del self._codes[event.event_id]
        logger.warning(f"Re-coding event {event.event_id or event.id} as {code}")
        self._events[event_id] = event.model_copy(update={"event_id": code})
        self._codes[code] = event_id

    def _next_code(self, year: int) -> str:
        highest = 0
        for code in self._codes:
            match = _CODE_PATTERN.match(code)
            if match and int(match.group(1)) == year:
                highest = max(highest, int(match.group(2)))
        return f"{CODE_PREFIX}-{year}-{highest + 1:03d}"

    def _stamp(self, after: datetime | None = None) -> datetime:
        """Current time, strictly later than any stamp handed out before.

        ``after`` is the record's current ``updated_at``; the new stamp is
        also kept strictly later than it.
        """
        now = self._clock()
        floor = max((t for t in (self._last_stamp, after) if t is not None), default=None)
        if floor is not None and now <= floor:
            now = floor + timedelta(microseconds=1)
        self._last_stamp = now
        return now
