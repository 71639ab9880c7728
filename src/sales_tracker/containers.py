"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sales_tracker.adapters.supabase_auth_provider import SupabaseAuthProvider
from sales_tracker.adapters.supabase_client_repository import SupabaseClientRepository
from sales_tracker.adapters.supabase_connection import SupabaseConnection
from sales_tracker.adapters.supabase_dashboard_repository import (
    SupabaseDashboardRepository,
)
from sales_tracker.adapters.supabase_photo_repository import SupabasePhotoRepository
from sales_tracker.adapters.supabase_photo_storage import SupabasePhotoStorage
from sales_tracker.adapters.supabase_sale_repository import SupabaseSaleRepository
from sales_tracker.config import Settings
from sales_tracker.domain.models import SessionState
from sales_tracker.services.clients import ClientService, ClientsPage
from sales_tracker.services.dashboard import DashboardService
from sales_tracker.services.mobile_menu import MobileMenuStore
from sales_tracker.services.routing import RouteGuard
from sales_tracker.services.sales import (
    NewSalePage,
    SaleDetailsPage,
    SaleService,
    SalesPage,
)
from sales_tracker.services.session_store import SessionStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies and per-page state."""

    settings: Settings
    session_store: SessionStore
    mobile_menu: MobileMenuStore
    route_guard: RouteGuard
    client_service: ClientService
    sale_service: SaleService
    dashboard_service: DashboardService
    clients_page: ClientsPage
    sales_page: SalesPage
    new_sale_page: NewSalePage
    sale_details_page: SaleDetailsPage
    close_resources: Callable[[], Awaitable[None]]


def assemble_container(  # noqa: PLR0913
    settings: Settings,
    session_store: SessionStore,
    client_service: ClientService,
    sale_service: SaleService,
    dashboard_service: DashboardService,
    close_resources: Callable[[], Awaitable[None]],
) -> AppContainer:
    """Build the stores and page states around already wired services."""
    mobile_menu = MobileMenuStore()
    new_sale_page = NewSalePage(sale_service, client_service)
    sale_details_page = SaleDetailsPage(sale_service)

    def release_drafts(state: SessionState) -> None:
        if state.user is None:
            new_sale_page.discard()
            sale_details_page.cancel_edit()

    session_store.subscribe(mobile_menu.on_session_change)
    session_store.subscribe(release_drafts)
    return AppContainer(
        settings=settings,
        session_store=session_store,
        mobile_menu=mobile_menu,
        route_guard=RouteGuard(session_store),
        client_service=client_service,
        sale_service=sale_service,
        dashboard_service=dashboard_service,
        clients_page=ClientsPage(client_service),
        sales_page=SalesPage(sale_service),
        new_sale_page=new_sale_page,
        sale_details_page=sale_details_page,
        close_resources=close_resources,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    connection = SupabaseConnection(
        resolved_settings.supabase_url, resolved_settings.supabase_anon_key
    )
    session_store = SessionStore(
        SupabaseAuthProvider(connection),
        password_reset_redirect_url=resolved_settings.password_reset_redirect_url,
    )
    client_service = ClientService(SupabaseClientRepository(connection))
    sale_service = SaleService(
        sale_repository=SupabaseSaleRepository(connection),
        photo_repository=SupabasePhotoRepository(connection),
        storage=SupabasePhotoStorage(connection, resolved_settings.storage_bucket),
        signed_url_expires_in=resolved_settings.signed_url_expires_in,
    )
    dashboard_service = DashboardService(SupabaseDashboardRepository(connection))

    async def close_resources() -> None:
        session_store.close()

    return assemble_container(
        settings=resolved_settings,
        session_store=session_store,
        client_service=client_service,
        sale_service=sale_service,
        dashboard_service=dashboard_service,
        close_resources=close_resources,
    )
