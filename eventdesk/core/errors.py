"""Exception types for the events core.

Three groups matter to callers:

- ``ValidationError``, ``NotFoundError`` and ``PreconditionFailedError``
  stop an operation and are reported as failures.
- ``RemoteServiceError`` subclasses describe Event Service failures. They
  are recovered locally by falling back to the in-memory store.
- ``OperationCancelled`` marks a superseded or torn-down call. It is not a
  failure and is never shown to the user.
"""


class EventsError(Exception):
    """Base class for events core errors."""


class ValidationError(EventsError):
    """A required field is missing or a value is out of range."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(EventsError):
    """The referenced event or child record does not exist."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class PreconditionFailedError(EventsError):
    """The target exists but is not in a state that allows the operation."""


class CapacityExceededError(PreconditionFailedError):
    def __init__(self, event_code: str, max_attendees: int) -> None:
        super().__init__(f"Event {event_code} is full ({max_attendees} attendees)")
        self.max_attendees = max_attendees


class StaleWriteError(PreconditionFailedError):
    """The record changed since the caller last read it."""


class InvalidTransitionError(PreconditionFailedError):
    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot move event from {current} to {requested} without override"
        )
        self.current = current
        self.requested = requested


class RemoteServiceError(EventsError):
    """Base class for Event Service failures."""


class UnauthorizedError(RemoteServiceError):
    """No valid credential, or the service rejected it."""


class UnreachableError(RemoteServiceError):
    """The service could not be reached (network error or timeout)."""


class ServerError(RemoteServiceError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OperationCancelled(Exception):
    """Raised inside a cancelled operation; callers discard it silently."""
