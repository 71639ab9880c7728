"""Domain models for sales and their photos."""

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

from sales_tracker.domain.clients import ClientChoice


@dataclass(frozen=True)
class SaleRecord:
    """Sale row as stored remotely."""

    id: UUID
    user_id: UUID
    client_id: UUID
    sale_date: date
    instagram: str | None
    notes: str | None
    is_completed: bool
    created_at: datetime


@dataclass(frozen=True)
class SaleSummary:
    """Sale list row with the client name projected in."""

    id: UUID
    sale_date: date
    is_completed: bool
    created_at: datetime
    notes: str | None
    instagram: str | None
    client_name: str | None


@dataclass(frozen=True)
class SalePhotoRecord:
    """Photo attached to a sale; `url` is only set for detail views."""

    id: UUID
    user_id: UUID
    sale_id: UUID
    storage_path: str
    created_at: datetime
    url: str | None = None


@dataclass(frozen=True)
class SaleDetail:
    """Sale with its client and photos."""

    id: UUID
    sale_date: date
    instagram: str | None
    notes: str | None
    is_completed: bool
    client: ClientChoice | None
    photos: list[SalePhotoRecord] = field(default_factory=list)


@dataclass(frozen=True)
class SaleFilters:
    """Structured filters for the sales list."""

    search: str = ""
    completed: bool | None = None
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class PhotoUpload:
    """Image bytes waiting to be uploaded."""

    filename: str
    content: bytes
    content_type: str | None = None
