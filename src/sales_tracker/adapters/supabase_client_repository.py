"""Supabase-backed client repository."""

from dataclasses import dataclass
from uuid import UUID

from sales_tracker.adapters.supabase_connection import SupabaseConnection
from sales_tracker.adapters.supabase_rows import (
    optional_str,
    parse_timestamp,
    parse_uuid,
)
from sales_tracker.domain.clients import ClientChoice, ClientRecord
from sales_tracker.services.clients import ClientRepository

_COLUMNS = "id, user_id, name, email, phone, created_at"


@dataclass
class SupabaseClientRepository(ClientRepository):
    """Supabase implementation for the `clients` table."""

    connection: SupabaseConnection

    def list_clients(self, owner_id: UUID, search: str | None) -> list[ClientRecord]:
        """Return the owner's clients, newest first."""
        query = (
            self.connection.client.table("clients")
            .select(_COLUMNS)
            .eq("user_id", str(owner_id))
        )
        if search:
            query = query.ilike("name", f"%{search}%")
        response = query.order("created_at", desc=True).execute()
        return [_parse_client(row) for row in response.data or []]

    def list_recent_choices(self, owner_id: UUID, limit: int) -> list[ClientChoice]:
        """Return the most recently created clients."""
        response = (
            self.connection.client.table("clients")
            .select("id, name")
            .eq("user_id", str(owner_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_choice(row) for row in response.data or []]

    def search_choices(
        self, owner_id: UUID, search: str, limit: int
    ) -> list[ClientChoice]:
        """Return clients whose name contains the search text."""
        response = (
            self.connection.client.table("clients")
            .select("id, name")
            .eq("user_id", str(owner_id))
            .ilike("name", f"%{search}%")
            .order("name", desc=False)
            .limit(limit)
            .execute()
        )
        return [_parse_choice(row) for row in response.data or []]

    def create_client(
        self, owner_id: UUID, name: str, email: str | None, phone: str | None
    ) -> ClientRecord:
        """Insert a client row and return it."""
        response = (
            self.connection.client.table("clients")
            .insert(
                {
                    "user_id": str(owner_id),
                    "name": name,
                    "email": email,
                    "phone": phone,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create client")
        return _parse_client(response.data[0])

    def update_client(  # noqa: PLR0913
        self,
        owner_id: UUID,
        client_id: UUID,
        name: str,
        email: str | None,
        phone: str | None,
    ) -> None:
        """Update a client row owned by the user."""
        self.connection.client.table("clients").update(
            {"name": name, "email": email, "phone": phone}
        ).eq("id", str(client_id)).eq("user_id", str(owner_id)).execute()

    def delete_client(self, owner_id: UUID, client_id: UUID) -> None:
        """Delete a client row owned by the user."""
        self.connection.client.table("clients").delete().eq("id", str(client_id)).eq(
            "user_id", str(owner_id)
        ).execute()


def _parse_client(row: dict[str, object]) -> ClientRecord:
    return ClientRecord(
        id=parse_uuid(row, "id"),
        user_id=parse_uuid(row, "user_id"),
        name=str(row["name"]),
        email=optional_str(row.get("email")),
        phone=optional_str(row.get("phone")),
        created_at=parse_timestamp(row.get("created_at")),
    )


def _parse_choice(row: dict[str, object]) -> ClientChoice:
    return ClientChoice(id=parse_uuid(row, "id"), name=str(row["name"]))
