"""Supabase-backed sale photo repository."""

from dataclasses import dataclass
from uuid import UUID

from sales_tracker.adapters.supabase_connection import SupabaseConnection
from sales_tracker.adapters.supabase_rows import parse_timestamp, parse_uuid
from sales_tracker.domain.sales import SalePhotoRecord
from sales_tracker.services.sales import SalePhotoRepository

_COLUMNS = "id, user_id, sale_id, storage_path, created_at"


@dataclass
class SupabasePhotoRepository(SalePhotoRepository):
    """Supabase implementation for photo records."""

    connection: SupabaseConnection

    def create_photo(
        self, owner_id: UUID, sale_id: UUID, storage_path: str
    ) -> SalePhotoRecord:
        """Create a photo record and return it."""
        response = (
            self.connection.client.table("sale_photos")
            .insert(
                {
                    "user_id": str(owner_id),
                    "sale_id": str(sale_id),
                    "storage_path": storage_path,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photo record")
        return _parse_photo(response.data[0])

    def list_photos(self, owner_id: UUID, sale_id: UUID) -> list[SalePhotoRecord]:
        """Return the photo records of a sale."""
        response = (
            self.connection.client.table("sale_photos")
            .select(_COLUMNS)
            .eq("sale_id", str(sale_id))
            .eq("user_id", str(owner_id))
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_photo(row) for row in response.data or []]

    def delete_photo(self, owner_id: UUID, photo_id: UUID) -> None:
        """Delete a photo record."""
        self.connection.client.table("sale_photos").delete().eq(
            "id", str(photo_id)
        ).eq("user_id", str(owner_id)).execute()


def _parse_photo(row: dict[str, object]) -> SalePhotoRecord:
    return SalePhotoRecord(
        id=parse_uuid(row, "id"),
        user_id=parse_uuid(row, "user_id"),
        sale_id=parse_uuid(row, "sale_id"),
        storage_path=str(row["storage_path"]),
        created_at=parse_timestamp(row.get("created_at")),
    )
