"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import RedirectResponse

from sales_tracker.api.auth import router as auth_router
from sales_tracker.api.clients import router as clients_router
from sales_tracker.api.dashboard import router as dashboard_router
from sales_tracker.api.navigation import router as navigation_router
from sales_tracker.api.sales import router as sales_router
from sales_tracker.api.views import loading_response
from sales_tracker.app_logging import configure_logging
from sales_tracker.config import missing_connection_settings
from sales_tracker.containers import AppContainer
from sales_tracker.services.routing import GuardAction


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        missing = missing_connection_settings(state_container.settings)
        if missing:
            logger.error(
                "Missing Supabase configuration: %s. Remote calls will fail.",
                ", ".join(missing),
            )
        state_container.session_store.start()
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.container = container

    @app.middleware("http")
    async def route_guard(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Apply the session-driven route guard to every request."""
        state_container: AppContainer = request.app.state.container
        decision = state_container.route_guard.resolve(request.url.path)
        if decision.action is GuardAction.LOADING:
            return loading_response()
        if decision.action is GuardAction.REDIRECT and decision.location:
            return RedirectResponse(decision.location, status_code=303)
        return await call_next(request)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    app.include_router(auth_router)
    app.include_router(navigation_router)
    app.include_router(dashboard_router)
    app.include_router(clients_router)
    app.include_router(sales_router)
    return app
