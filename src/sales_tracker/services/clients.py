"""Client listing, creation, inline editing and deletion."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID

from sales_tracker.domain.clients import ClientChoice, ClientRecord
from sales_tracker.forms import ClientForm
from sales_tracker.services.banner import Banner
from sales_tracker.services.validation import (
    FieldError,
    FormValues,
    ValidationFailed,
    parse_form,
)

logger = logging.getLogger(__name__)

CHOICE_LIMIT = 10


class ClientRepository(Protocol):
    """Persistence interface for clients."""

    def list_clients(self, owner_id: UUID, search: str | None) -> list[ClientRecord]:
        """Return the owner's clients, newest first."""

    def list_recent_choices(self, owner_id: UUID, limit: int) -> list[ClientChoice]:
        """Return the most recently created clients."""

    def search_choices(
        self, owner_id: UUID, search: str, limit: int
    ) -> list[ClientChoice]:
        """Return clients whose name matches, ordered by name."""

    def create_client(
        self, owner_id: UUID, name: str, email: str | None, phone: str | None
    ) -> ClientRecord:
        """Insert a client and return it."""

    def update_client(  # noqa: PLR0913
        self,
        owner_id: UUID,
        client_id: UUID,
        name: str,
        email: str | None,
        phone: str | None,
    ) -> None:
        """Update a client row owned by the user."""

    def delete_client(self, owner_id: UUID, client_id: UUID) -> None:
        """Delete a client row owned by the user."""


@dataclass
class ClientService:
    """Application service for client rows."""

    repository: ClientRepository

    def list_clients(
        self, owner_id: UUID, search: str | None = None
    ) -> list[ClientRecord]:
        return self.repository.list_clients(owner_id, search or None)

    def list_choices(self, owner_id: UUID, search: str = "") -> list[ClientChoice]:
        """Return picker options: recent clients, or name matches when searching."""
        if search:
            return self.repository.search_choices(owner_id, search, CHOICE_LIMIT)
        return self.repository.list_recent_choices(owner_id, CHOICE_LIMIT)

    def create_client(self, owner_id: UUID, values: FormValues) -> ClientRecord:
        """Validate and insert a new client."""
        form = parse_form(ClientForm, values)
        return self.repository.create_client(
            owner_id, name=form.name, email=form.email, phone=form.phone
        )

    def update_client(
        self, owner_id: UUID, client_id: UUID, values: FormValues
    ) -> ClientForm:
        """Validate and update an existing client, returning the saved values."""
        form = parse_form(ClientForm, values)
        self.repository.update_client(
            owner_id, client_id, name=form.name, email=form.email, phone=form.phone
        )
        return form

    def delete_client(self, owner_id: UUID, client_id: UUID) -> None:
        self.repository.delete_client(owner_id, client_id)


@dataclass
class ClientsPage:
    """State behind the clients list.

    The list is replaced wholesale on every load. Edits and deletions patch the
    in-memory list only after the remote call succeeded.
    """

    service: ClientService
    clients: list[ClientRecord] = field(default_factory=list)
    search_term: str = ""
    editing: ClientRecord | None = None
    pending_delete: ClientRecord | None = None
    banner: Banner | None = None
    field_errors: list[FieldError] = field(default_factory=list)

    def load(self, owner_id: UUID, search: str = "") -> None:
        """Fetch the owner's clients, optionally filtered by name."""
        self.search_term = search
        self.editing = None
        self.pending_delete = None
        self.banner = None
        self.field_errors = []
        try:
            self.clients = self.service.list_clients(owner_id, search)
        except Exception as exc:
            logger.exception("Failed to fetch clients")
            self.banner = Banner.from_exception("Erro ao buscar clientes.", exc)

    def begin_edit(self, client_id: UUID) -> bool:
        """Capture the row to edit; False when it is not in the list."""
        target = self._find(client_id)
        self.editing = target
        self.banner = None
        self.field_errors = []
        return target is not None

    def cancel_edit(self) -> None:
        self.editing = None
        self.banner = None
        self.field_errors = []

    def save_edit(self, owner_id: UUID, values: FormValues) -> bool:
        """Update the captured row and patch it in place."""
        if self.editing is None:
            return False
        target = self.editing
        self.banner = None
        self.field_errors = []
        try:
            form = self.service.update_client(owner_id, target.id, values)
        except ValidationFailed as exc:
            self.field_errors = exc.errors
            return False
        except Exception as exc:
            logger.exception("Failed to update client", extra={"client_id": target.id})
            self.banner = Banner.from_exception("Erro ao atualizar cliente", exc)
            return False

        updated = replace(target, name=form.name, email=form.email, phone=form.phone)
        self.clients = [
            updated if client.id == target.id else client for client in self.clients
        ]
        self.editing = None
        return True

    def request_delete(self, client_id: UUID) -> bool:
        """Ask for confirmation before deleting a row."""
        self.pending_delete = self._find(client_id)
        return self.pending_delete is not None

    def delete(self, owner_id: UUID, client_id: UUID, confirmed: bool) -> bool:
        """Delete a row once the user confirmed it."""
        self.pending_delete = None
        if not confirmed:
            return False
        self.banner = None
        try:
            self.service.delete_client(owner_id, client_id)
        except Exception as exc:
            logger.exception("Failed to delete client", extra={"client_id": client_id})
            self.banner = Banner.from_exception(
                "Erro ao excluir cliente. Tente novamente.", exc
            )
            return False
        self.clients = [client for client in self.clients if client.id != client_id]
        return True

    def _find(self, client_id: UUID) -> ClientRecord | None:
        for client in self.clients:
            if client.id == client_id:
                return client
        return None
