"""Explicit authorization context passed into every core operation.

The core never reads session state on its own: callers build an
``AuthContext`` (from a request header, or from the service credential
for background jobs) and hand it in.
"""
from dataclasses import dataclass
from datetime import datetime

from fastapi import Header

from eventdesk.core.config import settings


@dataclass(frozen=True, slots=True)
class AuthContext:
    token: str | None = None
    user_id: str | None = None
    expires_at: datetime | None = None

    @property
    def is_valid(self) -> bool:
        """A credential is present and not expired."""
        if not self.token:
            return False
        if self.expires_at is not None and self.expires_at <= datetime.now(self.expires_at.tzinfo):
            return False
        return True

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def service(cls) -> "AuthContext":
        """Credential used by the background sync job."""
        return cls(token=settings.event_service_token or None, user_id="sync")


def get_auth_context(
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
) -> AuthContext:
    """Dependency building the context from an ``Authorization: Bearer`` header."""
    if not authorization:
        return AuthContext.anonymous()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return AuthContext.anonymous()
    return AuthContext(token=token.strip(), user_id=x_user_id)
