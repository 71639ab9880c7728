"""Route table and the session-driven route guard."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from sales_tracker.domain.models import SessionState

LOGIN_PATH = "/login"
HOME_PATH = "/"

_UUID = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
_TOKEN = r"[A-Za-z0-9_-]+"


class Access(str, Enum):
    """Who may see a route."""

    OPEN = "open"
    PUBLIC_ONLY = "public_only"
    GUARDED = "guarded"


class GuardState(str, Enum):
    """Session state as seen by the guard."""

    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class GuardAction(str, Enum):
    """What the HTTP layer should do with a request."""

    RENDER = "render"
    REDIRECT = "redirect"
    LOADING = "loading"


@dataclass(frozen=True)
class Route:
    """Single entry of the route table."""

    pattern: str
    access: Access

    @property
    def regex(self) -> re.Pattern[str]:
        return re.compile(f"^{self.pattern}$")


@dataclass(frozen=True)
class RouteDecision:
    """Result of running the guard for a path."""

    action: GuardAction
    location: str | None = None
    route: Route | None = None


ROUTES: tuple[Route, ...] = (
    Route("/health", Access.OPEN),
    Route("/login", Access.PUBLIC_ONLY),
    Route("/register", Access.PUBLIC_ONLY),
    Route("/forgot-password", Access.PUBLIC_ONLY),
    Route("/", Access.GUARDED),
    Route("/logout", Access.GUARDED),
    Route("/menu/(toggle|close)", Access.GUARDED),
    Route("/clients", Access.GUARDED),
    Route("/clients/new", Access.GUARDED),
    Route("/clients/edit/cancel", Access.GUARDED),
    Route(f"/clients/{_UUID}/(edit|delete)", Access.GUARDED),
    Route("/sales", Access.GUARDED),
    Route("/sales/new", Access.GUARDED),
    Route("/sales/new/discard", Access.GUARDED),
    Route(f"/sales/new/photos/{_TOKEN}", Access.GUARDED),
    Route(f"/sales/{_UUID}", Access.GUARDED),
    Route(f"/sales/{_UUID}/(edit|delete)", Access.GUARDED),
    Route(f"/sales/{_UUID}/drafts/{_TOKEN}", Access.GUARDED),
    Route(f"/sales/{_UUID}/photos/{_UUID}/delete", Access.GUARDED),
)

_COMPILED = tuple((route, route.regex) for route in ROUTES)


def normalize_path(path: str) -> str:
    """Strip trailing slashes except for the root path."""
    stripped = path.rstrip("/")
    return stripped or HOME_PATH


def match_route(path: str) -> Route | None:
    """Return the route table entry for a path, if any."""
    normalized = normalize_path(path)
    for route, regex in _COMPILED:
        if regex.match(normalized):
            return route
    return None


def guard_state(state: SessionState) -> GuardState:
    """Classify a session snapshot."""
    if state.loading:
        return GuardState.LOADING
    if state.user is None:
        return GuardState.UNAUTHENTICATED
    return GuardState.AUTHENTICATED


def decide(path: str, state: SessionState) -> RouteDecision:
    """Decide whether to render, redirect or block a path."""
    route = match_route(path)
    if route is None:
        return RouteDecision(GuardAction.REDIRECT, location=HOME_PATH)
    if route.access is Access.OPEN:
        return RouteDecision(GuardAction.RENDER, route=route)

    current = guard_state(state)
    if current is GuardState.LOADING:
        return RouteDecision(GuardAction.LOADING, route=route)
    if route.access is Access.GUARDED and current is GuardState.UNAUTHENTICATED:
        return RouteDecision(GuardAction.REDIRECT, location=LOGIN_PATH, route=route)
    if route.access is Access.PUBLIC_ONLY and current is GuardState.AUTHENTICATED:
        return RouteDecision(GuardAction.REDIRECT, location=HOME_PATH, route=route)
    return RouteDecision(GuardAction.RENDER, route=route)


class SessionSource(Protocol):
    """Anything exposing the current session snapshot."""

    @property
    def state(self) -> SessionState:
        """Return the current session snapshot."""


@dataclass
class RouteGuard:
    """Applies the route table against the live session store."""

    session_source: SessionSource

    def resolve(self, path: str) -> RouteDecision:
        """Decide what to do with a request path right now."""
        return decide(path, self.session_source.state)
