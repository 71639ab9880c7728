"""Domain models for the authenticated session."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class SessionUser:
    """Represents the user signed in with the identity provider."""

    id: UUID
    email: str | None
    display_name: str | None = None


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the session store consumed by guards and pages."""

    user: SessionUser | None
    loading: bool

    @property
    def authenticated(self) -> bool:
        return not self.loading and self.user is not None
