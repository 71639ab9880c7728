"""Domain models for clients."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class ClientRecord:
    """Client row owned by a single user."""

    id: UUID
    user_id: UUID
    name: str
    email: str | None
    phone: str | None
    created_at: datetime


@dataclass(frozen=True)
class ClientChoice:
    """Minimal client projection used by the sale form picker."""

    id: UUID
    name: str
