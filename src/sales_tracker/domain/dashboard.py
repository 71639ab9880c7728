"""Domain models for the dashboard."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DashboardStats:
    """Owner-scoped counts shown on the dashboard."""

    total_clients: int
    total_sales: int
    completed_sales: int

    @property
    def pending_sales(self) -> int:
        return self.total_sales - self.completed_sales
