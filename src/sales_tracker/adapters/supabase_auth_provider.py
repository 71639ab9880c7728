"""Supabase Auth implementation of the identity provider."""

from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from supabase import AuthError

from sales_tracker.adapters.supabase_connection import SupabaseConnection
from sales_tracker.domain.models import SessionUser
from sales_tracker.services.session_store import (
    AuthListener,
    AuthProvider,
    AuthProviderError,
)


@dataclass
class SupabaseAuthProvider(AuthProvider):
    """Identity provider backed by `Client.auth`."""

    connection: SupabaseConnection

    def get_current_user(self) -> SessionUser | None:
        """Return the user of the stored session, if any."""
        session = self.connection.client.auth.get_session()
        if session is None:
            return None
        return _to_session_user(session.user)

    def sign_in(self, email: str, password: str) -> None:
        """Sign in with email and password."""
        try:
            self.connection.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            raise AuthProviderError(str(exc)) from exc

    def sign_up(self, email: str, password: str, display_name: str) -> bool:
        """Create an account storing the display name as `full_name`."""
        try:
            response = self.connection.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"full_name": display_name}},
                }
            )
        except AuthError as exc:
            raise AuthProviderError(str(exc)) from exc
        return response.session is not None

    def sign_out(self) -> None:
        """Sign out of the current session."""
        try:
            self.connection.client.auth.sign_out()
        except AuthError as exc:
            raise AuthProviderError(str(exc)) from exc

    def reset_password(self, email: str, redirect_to: str | None) -> None:
        """Send the password reset email."""
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            self.connection.client.auth.reset_password_for_email(email, options)
        except AuthError as exc:
            raise AuthProviderError(str(exc)) from exc

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Forward auth-state events as session users."""

        def handle(event: object, session: object | None) -> None:
            user = getattr(session, "user", None) if session is not None else None
            listener(str(event), _to_session_user(user) if user else None)

        subscription = self.connection.client.auth.on_auth_state_change(handle)
        return subscription.unsubscribe


def _to_session_user(user: object | None) -> SessionUser | None:
    if user is None:
        return None
    metadata = getattr(user, "user_metadata", None) or {}
    full_name = metadata.get("full_name")
    return SessionUser(
        id=UUID(str(user.id)),  # type: ignore[attr-defined]
        email=getattr(user, "email", None),
        display_name=str(full_name) if full_name else None,
    )
