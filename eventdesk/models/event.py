"""Event model for scheduled organizational activities.

This module defines the Event model, the central entity of the events
core, together with the draft and partial-update shapes used to create
and edit it. Dates and times are wall-clock values with no timezone: an
event at 09:00 on a given day means 09:00 local, wherever it is read.
"""

from datetime import date, datetime, time
from uuid import UUID, uuid4

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from eventdesk.models.enums import EventCategory, EventStatus, RecurrencePattern


def _calendar_date(value):
    """Keep only the calendar part of an ISO timestamp string.

    The Event Service serializes DATE columns as midnight timestamps
    (``2025-08-20T00:00:00.000Z``). Converting those through a timezone
    would shift the day, so the date portion is taken as-is.
    """
    if isinstance(value, str) and len(value) > 10 and value[4] == "-" and value[10] in "T ":
        return value[:10]
    return value


def _local_naive(value: datetime | None) -> datetime | None:
    """Convert aware timestamps to naive local time."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class EventFields(SQLModel):
    """Fields shared by stored events and drafts."""
    title: str = ""
    description: str | None = None
    category: EventCategory = EventCategory.SPECIAL_EVENT
    location: str | None = None
    organizer: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None

    start_date: date | None = None
    end_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None

    is_recurring: bool = False
    recurrence_pattern: RecurrencePattern | None = None

    registration_required: bool = False
    max_attendees: int | None = None  # 0 or None means no limit
    registration_deadline: date | None = None

    budget: float = 0.0
    actual_cost: float = 0.0

    status: EventStatus = EventStatus.PLANNED
    is_active: bool = True

    @field_validator("start_date", "end_date", "registration_deadline", mode="before")
    @classmethod
    def _strip_time_part(cls, value):
        return _calendar_date(value)

    @field_validator("recurrence_pattern", mode="before")
    @classmethod
    def _blank_pattern_is_none(cls, value):
        return value or None


class EventCreate(EventFields):
    """A staff-submitted draft. Required fields are checked by the store."""


class Event(EventFields):
    """A single scheduled occurrence.

    Recurring events carry their pattern as metadata only; each Event is
    one instance and no future rows are generated from it.

    Attributes:
        id: Internal identifier (UUID), assigned at creation.
        event_id: Human-readable external code such as ``EVT-2025-004``,
            unique and immutable once assigned.
        title: Display title. Required.
        start_date: Calendar day the event starts. Required.
        start_time: Wall-clock start time. Required.
        max_attendees: Capacity. ``0`` or ``None`` means unbounded.
        budget: Allocated amount, never negative.
        actual_cost: Cumulative spend. May exceed ``budget``.
        status: One of the four lifecycle states. New events are Planned.
        is_active: Visibility flag, distinct from deletion.
        created_at: When the event was created (local time).
        updated_at: Refreshed on every mutation, strictly increasing.
    """
    id: UUID = Field(default_factory=uuid4)
    event_id: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _naive_timestamps(cls, value):
        return _local_naive(value)

    @property
    def starts_at(self) -> datetime:
        """The start as a single local instant, used for sorting and countdowns."""
        return datetime.combine(self.start_date, self.start_time or time.min)

    @property
    def ends_at(self) -> datetime | None:
        if self.end_date is None and self.end_time is None:
            return None
        return datetime.combine(self.end_date or self.start_date, self.end_time or time.min)

    @property
    def has_capacity_limit(self) -> bool:
        return bool(self.max_attendees)


class EventUpdate(SQLModel):
    """A partial update. Only fields explicitly set are merged."""
    title: str | None = None
    description: str | None = None
    category: EventCategory | None = None
    location: str | None = None
    organizer: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    is_recurring: bool | None = None
    recurrence_pattern: RecurrencePattern | None = None
    registration_required: bool | None = None
    max_attendees: int | None = None
    registration_deadline: date | None = None
    budget: float | None = None
    actual_cost: float | None = None
    status: EventStatus | None = None
    is_active: bool | None = None

    @field_validator("start_date", "end_date", "registration_deadline", mode="before")
    @classmethod
    def _strip_time_part(cls, value):
        return _calendar_date(value)


class StatusChange(SQLModel):
    """Explicit status transition request."""
    status: EventStatus
    override: bool = False
