"""Sales: filtered listing, two-phase creation, editing and deletion.

Writes that span the sales table, the photo table and object storage are not
transactional. Photos are uploaded one at a time; a failure stops the loop and
keeps everything written before it.
"""

import logging
import secrets
import string
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Protocol
from uuid import UUID

from sales_tracker.domain.clients import ClientChoice
from sales_tracker.domain.sales import (
    PhotoUpload,
    SaleDetail,
    SaleFilters,
    SalePhotoRecord,
    SaleRecord,
    SaleSummary,
)
from sales_tracker.forms import NewSaleForm, SaleEditForm
from sales_tracker.services.banner import Banner
from sales_tracker.services.clients import ClientService
from sales_tracker.services.photo_drafts import PhotoDraft
from sales_tracker.services.validation import (
    FieldError,
    FormValues,
    ValidationFailed,
    parse_form,
)

logger = logging.getLogger(__name__)

NO_PHOTOS_MESSAGE = "Por favor, adicione pelo menos uma foto"
_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 13

ProgressCallback = Callable[[int], None]


class SaleRepository(Protocol):
    """Persistence interface for sales."""

    def list_sales(
        self,
        owner_id: UUID,
        completed: bool | None,
        start_date: date | None,
        end_date: date | None,
    ) -> list[SaleSummary]:
        """Return the owner's sales, newest sale date first."""

    def create_sale(  # noqa: PLR0913
        self,
        owner_id: UUID,
        client_id: UUID,
        sale_date: date,
        instagram: str | None,
        notes: str | None,
    ) -> SaleRecord:
        """Insert a pending sale and return it."""

    def get_sale(self, owner_id: UUID, sale_id: UUID) -> SaleDetail | None:
        """Return a sale with its client, without photos."""

    def update_sale(  # noqa: PLR0913
        self,
        owner_id: UUID,
        sale_id: UUID,
        sale_date: date,
        instagram: str | None,
        notes: str | None,
        is_completed: bool,
    ) -> None:
        """Update a sale row owned by the user."""

    def delete_sale(self, owner_id: UUID, sale_id: UUID) -> None:
        """Delete a sale row; photo rows go with it."""


class SalePhotoRepository(Protocol):
    """Persistence interface for sale photo records."""

    def create_photo(
        self, owner_id: UUID, sale_id: UUID, storage_path: str
    ) -> SalePhotoRecord:
        """Insert a photo record and return it."""

    def list_photos(self, owner_id: UUID, sale_id: UUID) -> list[SalePhotoRecord]:
        """Return the photo records of a sale."""

    def delete_photo(self, owner_id: UUID, photo_id: UUID) -> None:
        """Delete a photo record."""


class PhotoStorage(Protocol):
    """Object storage for photo bytes."""

    def upload(self, path: str, content: bytes, content_type: str | None) -> None:
        """Store bytes under a path."""

    def remove(self, paths: list[str]) -> None:
        """Remove stored objects."""

    def create_signed_url(self, path: str, expires_in: int) -> str | None:
        """Return a time-limited read URL."""


class PhotoSyncError(RuntimeError):
    """Raised when the photo loop stops; earlier uploads are kept."""

    def __init__(self, sale_id: UUID, completed: int, total: int) -> None:
        super().__init__(
            f"Photo upload stopped after {completed} of {total} for sale {sale_id}"
        )
        self.sale_id = sale_id
        self.completed = completed
        self.total = total


def build_storage_path(owner_id: UUID, sale_id: UUID, filename: str) -> str:
    """Return `<owner>/<sale>/<ms timestamp>-<random>.<ext>` for an upload."""
    extension = filename.rsplit(".", 1)[-1]
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{owner_id}/{sale_id}/{time.time_ns() // 1_000_000}-{suffix}.{extension}"


def matches_search(sale: SaleSummary, search: str) -> bool:
    """Case-insensitive substring match on client name or instagram handle."""
    needle = search.lower()
    return needle in (sale.client_name or "").lower() or needle in (
        sale.instagram or ""
    ).lower()


@dataclass
class SaleService:
    """Application service for sales and their photos."""

    sale_repository: SaleRepository
    photo_repository: SalePhotoRepository
    storage: PhotoStorage
    signed_url_expires_in: int = 3600

    def list_sales(self, owner_id: UUID, filters: SaleFilters) -> list[SaleSummary]:
        """Query with the structured filters, then apply the text search locally."""
        both_dates = filters.start_date is not None and filters.end_date is not None
        sales = self.sale_repository.list_sales(
            owner_id,
            completed=filters.completed,
            start_date=filters.start_date if both_dates else None,
            end_date=filters.end_date if both_dates else None,
        )
        if filters.search:
            sales = [sale for sale in sales if matches_search(sale, filters.search)]
        return sales

    def create_sale(
        self,
        owner_id: UUID,
        values: FormValues,
        photos: list[PhotoUpload],
        on_progress: ProgressCallback | None = None,
    ) -> SaleRecord:
        """Insert the sale, then upload and record each photo in order."""
        form = parse_form(NewSaleForm, values)
        if not photos:
            raise ValidationFailed([FieldError("photos", NO_PHOTOS_MESSAGE)])

        sale = self.sale_repository.create_sale(
            owner_id,
            client_id=form.client_id,
            sale_date=form.sale_date,
            instagram=form.instagram,
            notes=form.notes,
        )
        logger.info("Created sale", extra={"sale_id": str(sale.id)})
        self.upload_photos(owner_id, sale.id, photos, on_progress)
        return sale

    def upload_photos(
        self,
        owner_id: UUID,
        sale_id: UUID,
        photos: list[PhotoUpload],
        on_progress: ProgressCallback | None = None,
    ) -> list[SalePhotoRecord]:
        """Upload photos sequentially, recording each one after its upload."""
        total = len(photos)
        created: list[SalePhotoRecord] = []
        for index, photo in enumerate(photos, start=1):
            path = build_storage_path(owner_id, sale_id, photo.filename)
            try:
                self.storage.upload(path, photo.content, photo.content_type)
                created.append(
                    self.photo_repository.create_photo(owner_id, sale_id, path)
                )
            except Exception as exc:
                logger.exception(
                    "Photo upload failed",
                    extra={"sale_id": str(sale_id), "path": path},
                )
                raise PhotoSyncError(sale_id, len(created), total) from exc
            if on_progress is not None:
                on_progress(round(index / total * 100))
        return created

    def get_sale_detail(self, owner_id: UUID, sale_id: UUID) -> SaleDetail | None:
        """Return the sale with its photos and signed read URLs."""
        sale = self.sale_repository.get_sale(owner_id, sale_id)
        if sale is None:
            return None
        photos = self.photo_repository.list_photos(owner_id, sale_id)
        return replace(sale, photos=[self._with_url(photo) for photo in photos])

    def update_sale(
        self,
        owner_id: UUID,
        sale_id: UUID,
        values: FormValues,
        new_photos: list[PhotoUpload],
        on_progress: ProgressCallback | None = None,
    ) -> list[SalePhotoRecord]:
        """Update the sale fields, then upload any newly attached photos."""
        form = parse_form(SaleEditForm, values)
        self.sale_repository.update_sale(
            owner_id,
            sale_id,
            sale_date=form.sale_date,
            instagram=form.instagram,
            notes=form.notes,
            is_completed=form.is_completed,
        )
        if not new_photos:
            return []
        return self.upload_photos(owner_id, sale_id, new_photos, on_progress)

    def delete_photo(self, owner_id: UUID, photo: SalePhotoRecord) -> None:
        """Remove the stored object, then its record."""
        self.storage.remove([photo.storage_path])
        self.photo_repository.delete_photo(owner_id, photo.id)

    def delete_sale(
        self, owner_id: UUID, sale_id: UUID, photos: list[SalePhotoRecord]
    ) -> list[str]:
        """Remove every stored photo, then the sale row.

        Storage failures are logged and skipped so the sale is still deleted.
        Returns the storage paths that could not be removed.
        """
        orphaned: list[str] = []
        for photo in photos:
            try:
                self.storage.remove([photo.storage_path])
            except Exception:
                logger.exception(
                    "Failed to remove stored photo",
                    extra={"sale_id": str(sale_id), "path": photo.storage_path},
                )
                orphaned.append(photo.storage_path)
        self.sale_repository.delete_sale(owner_id, sale_id)
        if orphaned:
            logger.warning(
                "Deleted sale %s leaving %d stored photo(s)", sale_id, len(orphaned)
            )
        return orphaned

    def _with_url(self, photo: SalePhotoRecord) -> SalePhotoRecord:
        try:
            url = self.storage.create_signed_url(
                photo.storage_path, self.signed_url_expires_in
            )
        except Exception:
            logger.exception(
                "Failed to sign photo URL", extra={"path": photo.storage_path}
            )
            url = None
        return replace(photo, url=url)


@dataclass
class SalesPage:
    """State behind the sales list and its filters."""

    service: SaleService
    filters: SaleFilters = field(default_factory=SaleFilters)
    sales: list[SaleSummary] = field(default_factory=list)
    banner: Banner | None = None

    def apply_filters(self, owner_id: UUID, filters: SaleFilters) -> None:
        """Replace the filters and re-run the query."""
        self.filters = filters
        self.banner = None
        try:
            self.sales = self.service.list_sales(owner_id, filters)
        except Exception as exc:
            logger.exception("Failed to fetch sales")
            self.banner = Banner.from_exception("Erro ao buscar vendas.", exc)

    def clear_filters(self, owner_id: UUID) -> None:
        self.apply_filters(owner_id, SaleFilters())


@dataclass
class NewSalePage:
    """State behind the new-sale form, including staged photos."""

    sale_service: SaleService
    client_service: ClientService
    draft: PhotoDraft = field(default_factory=PhotoDraft)
    clients: list[ClientChoice] = field(default_factory=list)
    client_search: str = ""
    progress: int = 0
    banner: Banner | None = None
    field_errors: list[FieldError] = field(default_factory=list)

    def mount(self, owner_id: UUID) -> None:
        """Start a fresh form; anything staged by an abandoned form is released."""
        self.draft.release_all()
        self.progress = 0
        self.banner = None
        self.field_errors = []
        self.client_search = ""
        self._load_clients(owner_id, "")

    def search_clients(self, owner_id: UUID, term: str) -> None:
        """Search the picker by name; an empty term shows recent clients."""
        self.client_search = term
        self._load_clients(owner_id, term)

    def attach(self, uploads: list[PhotoUpload]) -> list[str]:
        return [self.draft.attach(upload) for upload in uploads]

    def remove(self, token: str) -> bool:
        return self.draft.release(token)

    def discard(self) -> None:
        self.draft.release_all()
        self.progress = 0

    def submit(self, owner_id: UUID, values: FormValues) -> SaleRecord | None:
        """Create the sale from the form and the staged photos."""
        self.banner = None
        self.field_errors = []
        self.progress = 0
        try:
            sale = self.sale_service.create_sale(
                owner_id, values, self.draft.uploads(), on_progress=self._set_progress
            )
        except ValidationFailed as exc:
            self.field_errors = exc.errors
            return None
        except Exception as exc:
            logger.exception("Failed to create sale")
            self.banner = Banner.from_exception(
                "Ocorreu um erro ao criar a venda.", exc
            )
            return None
        self.draft.release_all()
        return sale

    def _set_progress(self, percent: int) -> None:
        self.progress = percent

    def _load_clients(self, owner_id: UUID, term: str) -> None:
        try:
            self.clients = self.client_service.list_choices(owner_id, term)
        except Exception as exc:
            logger.exception("Failed to fetch clients for the sale form")
            self.banner = Banner.from_exception("Erro ao buscar clientes.", exc)


@dataclass
class SaleDetailsPage:
    """State behind the sale details view and its edit form."""

    service: SaleService
    draft: PhotoDraft = field(default_factory=PhotoDraft)
    sale: SaleDetail | None = None
    editing: bool = False
    progress: int = 0
    banner: Banner | None = None
    field_errors: list[FieldError] = field(default_factory=list)

    def load(self, owner_id: UUID, sale_id: UUID) -> None:
        """Fetch the sale; switching to another sale abandons the edit form."""
        if self.sale is not None and self.sale.id != sale_id:
            self.draft.release_all()
            self.editing = False
        self.banner = None
        self.field_errors = []
        self._fetch(owner_id, sale_id)

    def begin_edit(self) -> None:
        self.editing = self.sale is not None
        self.field_errors = []

    def cancel_edit(self) -> None:
        self.editing = False
        self.field_errors = []
        self.draft.release_all()

    def attach(self, uploads: list[PhotoUpload]) -> list[str]:
        return [self.draft.attach(upload) for upload in uploads]

    def remove(self, token: str) -> bool:
        return self.draft.release(token)

    def save(self, owner_id: UUID, values: FormValues) -> bool:
        """Persist the edit form and any staged photos, then re-fetch."""
        if self.sale is None:
            return False
        sale_id = self.sale.id
        self.banner = None
        self.field_errors = []
        self.progress = 0
        try:
            self.service.update_sale(
                owner_id,
                sale_id,
                values,
                self.draft.uploads(),
                on_progress=self._set_progress,
            )
        except ValidationFailed as exc:
            self.field_errors = exc.errors
            return False
        except Exception as exc:
            logger.exception("Failed to update sale", extra={"sale_id": str(sale_id)})
            self.banner = Banner.from_exception(
                "Ocorreu um erro ao atualizar a venda.", exc
            )
            return False
        self.draft.release_all()
        self.editing = False
        self._fetch(owner_id, sale_id)
        return True

    def delete_photo(self, owner_id: UUID, photo_id: UUID) -> bool:
        """Delete one stored photo and its record."""
        if self.sale is None:
            return False
        photo = next((p for p in self.sale.photos if p.id == photo_id), None)
        if photo is None:
            return False
        try:
            self.service.delete_photo(owner_id, photo)
        except Exception as exc:
            logger.exception("Failed to delete photo", extra={"photo_id": str(photo_id)})
            self.banner = Banner.from_exception("Erro ao excluir a foto.", exc)
            return False
        self.sale = replace(
            self.sale, photos=[p for p in self.sale.photos if p.id != photo_id]
        )
        return True

    def delete_sale(self, owner_id: UUID, confirmed: bool) -> bool:
        """Delete the sale once the user confirmed it."""
        if self.sale is None or not confirmed:
            return False
        try:
            self.service.delete_sale(owner_id, self.sale.id, self.sale.photos)
        except Exception as exc:
            logger.exception("Failed to delete sale", extra={"sale_id": str(self.sale.id)})
            self.banner = Banner.from_exception("Erro ao excluir a venda.", exc)
            return False
        self.draft.release_all()
        self.sale = None
        self.editing = False
        return True

    def _set_progress(self, percent: int) -> None:
        self.progress = percent

    def _fetch(self, owner_id: UUID, sale_id: UUID) -> None:
        try:
            self.sale = self.service.get_sale_detail(owner_id, sale_id)
        except Exception as exc:
            logger.exception("Failed to fetch sale", extra={"sale_id": str(sale_id)})
            self.sale = None
            self.banner = Banner.from_exception(
                "Erro ao carregar os dados da venda.", exc
            )
