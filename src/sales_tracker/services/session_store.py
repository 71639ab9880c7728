"""Session store wrapping the identity provider.

The store owns the current user and the loading flag. It is created once by
the container, started in the application lifespan and closed at shutdown.
Every auth-state event from the provider replaces the user and is broadcast to
all subscribers synchronously, in registration order.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from sales_tracker.domain.models import SessionState, SessionUser

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_ERROR = "Invalid login credentials"
INVALID_CREDENTIALS_MESSAGE = "Usuário ou senha inválidos. Tente novamente."
SIGN_IN_FAILED_MESSAGE = "Ocorreu um erro ao fazer login. Tente novamente."
SIGN_UP_FAILED_MESSAGE = "Ocorreu um erro ao criar a conta. Tente novamente."
SIGN_OUT_FAILED_MESSAGE = "Ocorreu um erro ao sair. Tente novamente."
RESET_FAILED_MESSAGE = "Ocorreu um erro ao enviar o email. Tente novamente."

AuthListener = Callable[[str, SessionUser | None], None]
SessionSubscriber = Callable[[SessionState], None]


class AuthProviderError(Exception):
    """Raised by providers with the human-readable message to surface."""


class AuthProvider(Protocol):
    """Interface for the external identity provider."""

    def get_current_user(self) -> SessionUser | None:
        """Return the user of the persisted session, if any."""

    def sign_in(self, email: str, password: str) -> None:
        """Sign in with email and password."""

    def sign_up(self, email: str, password: str, display_name: str) -> bool:
        """Create an account; return True when a session was started."""

    def sign_out(self) -> None:
        """End the current session."""

    def reset_password(self, email: str, redirect_to: str | None) -> None:
        """Send the out-of-band password reset email."""

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register an auth-state listener and return its unsubscribe handle."""


@dataclass(frozen=True)
class AuthResult:
    """Outcome of an auth operation; `error` carries the provider message."""

    error: str | None = None
    requires_confirmation: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def sign_in_error_message(error: str) -> str:
    """Map a provider sign-in error to the message shown to the user."""
    if error == INVALID_CREDENTIALS_ERROR:
        return INVALID_CREDENTIALS_MESSAGE
    return SIGN_IN_FAILED_MESSAGE


@dataclass
class SessionStore:
    """Holds the authenticated user and notifies dependents of changes."""

    provider: AuthProvider
    password_reset_redirect_url: str | None = None
    _user: SessionUser | None = None
    _loading: bool = True
    _subscribers: list[SessionSubscriber] = field(default_factory=list)
    _unsubscribe_provider: Callable[[], None] | None = None

    @property
    def state(self) -> SessionState:
        return SessionState(user=self._user, loading=self._loading)

    @property
    def user(self) -> SessionUser | None:
        return self._user

    @property
    def loading(self) -> bool:
        return self._loading

    def start(self) -> None:
        """Fetch the current session and start listening for auth events."""
        if self._unsubscribe_provider is not None:
            return
        try:
            self._user = self.provider.get_current_user()
        except Exception:
            logger.exception("Failed to fetch the current session")
            self._user = None
        self._loading = False
        try:
            self._unsubscribe_provider = self.provider.subscribe(
                self._handle_auth_event
            )
        except Exception:
            logger.exception("Failed to subscribe to auth events")
        self._notify()

    def close(self) -> None:
        """Stop listening for auth events and drop subscribers."""
        if self._unsubscribe_provider is not None:
            self._unsubscribe_provider()
            self._unsubscribe_provider = None
        self._subscribers.clear()

    def subscribe(self, subscriber: SessionSubscriber) -> Callable[[], None]:
        """Register a subscriber called on every session change."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Sign in; navigation is left to the caller."""
        try:
            self.provider.sign_in(email, password)
        except AuthProviderError as exc:
            logger.info("Sign-in rejected: %s", exc)
            return AuthResult(error=str(exc))
        except Exception:
            logger.exception("Sign-in failed")
            return AuthResult(error=SIGN_IN_FAILED_MESSAGE)
        return AuthResult()

    def sign_up(self, email: str, password: str, display_name: str) -> AuthResult:
        """Create an account with the display name as user metadata."""
        try:
            session_started = self.provider.sign_up(email, password, display_name)
        except AuthProviderError as exc:
            logger.info("Sign-up rejected: %s", exc)
            return AuthResult(error=str(exc))
        except Exception:
            logger.exception("Sign-up failed")
            return AuthResult(error=SIGN_UP_FAILED_MESSAGE)
        return AuthResult(requires_confirmation=not session_started)

    def sign_out(self) -> AuthResult:
        """End the session; the provider event clears the user."""
        try:
            self.provider.sign_out()
        except AuthProviderError as exc:
            logger.warning("Sign-out failed: %s", exc)
            return AuthResult(error=str(exc))
        except Exception:
            logger.exception("Sign-out failed")
            return AuthResult(error=SIGN_OUT_FAILED_MESSAGE)
        return AuthResult()

    def reset_password(self, email: str) -> AuthResult:
        """Trigger the provider's reset flow without touching the session."""
        try:
            self.provider.reset_password(email, self.password_reset_redirect_url)
        except AuthProviderError as exc:
            logger.info("Password reset rejected: %s", exc)
            return AuthResult(error=str(exc))
        except Exception:
            logger.exception("Password reset failed")
            return AuthResult(error=RESET_FAILED_MESSAGE)
        return AuthResult()

    def _handle_auth_event(self, event: str, user: SessionUser | None) -> None:
        logger.info("Auth state changed: %s", event)
        self._user = user
        self._loading = False
        self._notify()

    def _notify(self) -> None:
        state = self.state
        for subscriber in list(self._subscribers):
            subscriber(state)
