"""Visibility flag for the mobile navigation menu."""

from dataclasses import dataclass

from sales_tracker.domain.models import SessionState


@dataclass
class MobileMenuStore:
    """Open/closed state of the sidebar on small screens."""

    is_open: bool = False

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> None:
        self.is_open = not self.is_open

    def on_session_change(self, state: SessionState) -> None:
        """Reset the menu when the authenticated layout goes away."""
        if state.user is None:
            self.close()
