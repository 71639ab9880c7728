"""Owner-scoped counts for the dashboard."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from sales_tracker.domain.dashboard import DashboardStats


class DashboardRepository(Protocol):
    """Count-only queries used by the dashboard."""

    def count_clients(self, owner_id: UUID) -> int:
        """Return how many clients the owner has."""

    def count_sales(self, owner_id: UUID, completed: bool | None = None) -> int:
        """Return how many sales the owner has, optionally by completion."""


@dataclass
class DashboardService:
    """Service computing a dashboard snapshot."""

    repository: DashboardRepository

    def get_stats(self, owner_id: UUID) -> DashboardStats:
        """Run the three count queries; pending is derived from them."""
        return DashboardStats(
            total_clients=self.repository.count_clients(owner_id),
            total_sales=self.repository.count_sales(owner_id),
            completed_sales=self.repository.count_sales(owner_id, completed=True),
        )
