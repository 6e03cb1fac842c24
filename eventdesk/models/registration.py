"""Registration model for event signups.

A Registration belongs to exactly one Event and is removed with it.
Registrations are only accepted for events that require them.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from eventdesk.models.enums import RegistrationStatus


class RegistrantInput(SQLModel):
    """Details submitted by a person signing up."""
    name: str = ""
    email: str = ""
    phone: str | None = None
    special_requirements: str | None = None


class Registration(RegistrantInput):
    """A person's signup record against one event.

    Attributes:
        id: Unique identifier (UUID).
        event_id: Internal id of the owning Event.
        name: Registrant's name.
        email: Contact email. Required, and unique per event among
            registrations that are not cancelled.
        registered_at: Submission time, assigned by the system.
        status: Pending, Confirmed or Cancelled. Only Confirmed
            registrations count toward capacity.
    """
    id: UUID = Field(default_factory=uuid4)
    event_id: UUID
    registered_at: datetime = Field(default_factory=datetime.now)
    status: RegistrationStatus = RegistrationStatus.CONFIRMED
