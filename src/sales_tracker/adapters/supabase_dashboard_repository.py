"""Supabase repository for dashboard counts."""

from dataclasses import dataclass
from uuid import UUID

from sales_tracker.adapters.supabase_connection import SupabaseConnection
from sales_tracker.services.dashboard import DashboardRepository


@dataclass
class SupabaseDashboardRepository(DashboardRepository):
    """Count-only queries against `clients` and `sales`."""

    connection: SupabaseConnection

    def count_clients(self, owner_id: UUID) -> int:
        """Return the number of clients owned by the user."""
        response = (
            self.connection.client.table("clients")
            .select("id", count="exact", head=True)
            .eq("user_id", str(owner_id))
            .execute()
        )
        return response.count or 0

    def count_sales(self, owner_id: UUID, completed: bool | None = None) -> int:
        """Return the number of sales, optionally filtered by completion."""
        query = (
            self.connection.client.table("sales")
            .select("id", count="exact", head=True)
            .eq("user_id", str(owner_id))
        )
        if completed is not None:
            query = query.eq("is_completed", completed)
        return query.execute().count or 0
