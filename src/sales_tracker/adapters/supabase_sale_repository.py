"""Supabase-backed sale repository."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sales_tracker.adapters.supabase_connection import SupabaseConnection
from sales_tracker.adapters.supabase_rows import (
    nested_row,
    optional_str,
    parse_date,
    parse_timestamp,
    parse_uuid,
)
from sales_tracker.domain.clients import ClientChoice
from sales_tracker.domain.sales import SaleDetail, SaleRecord, SaleSummary
from sales_tracker.services.sales import SaleRepository

_SUMMARY_COLUMNS = (
    "id, sale_date, is_completed, created_at, notes, instagram, clients(name)"
)
_DETAIL_COLUMNS = (
    "id, sale_date, instagram, notes, is_completed, client_id, clients(id, name)"
)


@dataclass
class SupabaseSaleRepository(SaleRepository):
    """Supabase implementation for the `sales` table."""

    connection: SupabaseConnection

    def list_sales(
        self,
        owner_id: UUID,
        completed: bool | None,
        start_date: date | None,
        end_date: date | None,
    ) -> list[SaleSummary]:
        """Return the owner's sales with client names, newest sale date first."""
        query = (
            self.connection.client.table("sales")
            .select(_SUMMARY_COLUMNS)
            .eq("user_id", str(owner_id))
        )
        if completed is not None:
            query = query.eq("is_completed", completed)
        if start_date is not None and end_date is not None:
            query = query.gte("sale_date", start_date.isoformat()).lte(
                "sale_date", end_date.isoformat()
            )
        response = query.order("sale_date", desc=True).execute()
        return [_parse_summary(row) for row in response.data or []]

    def create_sale(  # noqa: PLR0913
        self,
        owner_id: UUID,
        client_id: UUID,
        sale_date: date,
        instagram: str | None,
        notes: str | None,
    ) -> SaleRecord:
        """Insert a pending sale row and return it."""
        response = (
            self.connection.client.table("sales")
            .insert(
                {
                    "user_id": str(owner_id),
                    "client_id": str(client_id),
                    "sale_date": sale_date.isoformat(),
                    "instagram": instagram,
                    "notes": notes,
                    "is_completed": False,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create sale")
        return _parse_sale(response.data[0])

    def get_sale(self, owner_id: UUID, sale_id: UUID) -> SaleDetail | None:
        """Return a sale with its client, if the owner has it."""
        response = (
            self.connection.client.table("sales")
            .select(_DETAIL_COLUMNS)
            .eq("id", str(sale_id))
            .eq("user_id", str(owner_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_detail(response.data[0])

    def update_sale(  # noqa: PLR0913
        self,
        owner_id: UUID,
        sale_id: UUID,
        sale_date: date,
        instagram: str | None,
        notes: str | None,
        is_completed: bool,
    ) -> None:
        """Update the editable sale columns."""
        self.connection.client.table("sales").update(
            {
                "sale_date": sale_date.isoformat(),
                "instagram": instagram,
                "notes": notes,
                "is_completed": is_completed,
            }
        ).eq("id", str(sale_id)).eq("user_id", str(owner_id)).execute()

    def delete_sale(self, owner_id: UUID, sale_id: UUID) -> None:
        """Delete a sale row; `sale_photos` rows cascade in the database."""
        self.connection.client.table("sales").delete().eq("id", str(sale_id)).eq(
            "user_id", str(owner_id)
        ).execute()


def _parse_sale(row: dict[str, object]) -> SaleRecord:
    return SaleRecord(
        id=parse_uuid(row, "id"),
        user_id=parse_uuid(row, "user_id"),
        client_id=parse_uuid(row, "client_id"),
        sale_date=parse_date(row.get("sale_date")),
        instagram=optional_str(row.get("instagram")),
        notes=optional_str(row.get("notes")),
        is_completed=bool(row.get("is_completed", False)),
        created_at=parse_timestamp(row.get("created_at")),
    )


def _parse_summary(row: dict[str, object]) -> SaleSummary:
    client = nested_row(row.get("clients"))
    return SaleSummary(
        id=parse_uuid(row, "id"),
        sale_date=parse_date(row.get("sale_date")),
        is_completed=bool(row.get("is_completed", False)),
        created_at=parse_timestamp(row.get("created_at")),
        notes=optional_str(row.get("notes")),
        instagram=optional_str(row.get("instagram")),
        client_name=optional_str(client.get("name")) if client else None,
    )


def _parse_detail(row: dict[str, object]) -> SaleDetail:
    client = nested_row(row.get("clients"))
    return SaleDetail(
        id=parse_uuid(row, "id"),
        sale_date=parse_date(row.get("sale_date")),
        instagram=optional_str(row.get("instagram")),
        notes=optional_str(row.get("notes")),
        is_completed=bool(row.get("is_completed", False)),
        client=(
            ClientChoice(id=parse_uuid(client, "id"), name=str(client.get("name", "")))
            if client
            else None
        ),
    )
