"""Dashboard page with owner-scoped counts."""

from __future__ import annotations

import logging
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from sales_tracker.api.common import get_container, render_page, require_owner
from sales_tracker.api.views import dashboard_body
from sales_tracker.domain.dashboard import DashboardStats
from sales_tracker.services.banner import Banner

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])


@router.get("/", response_model=None)
async def dashboard(
    request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Show a fresh snapshot of client and sale counts."""
    container = get_container(request)
    banner = None
    try:
        stats = container.dashboard_service.get_stats(owner)
    except Exception as exc:
        logger.exception("Failed to fetch dashboard stats")
        stats = DashboardStats(total_clients=0, total_sales=0, completed_sales=0)
        banner = Banner.from_exception("Erro ao carregar o dashboard.", exc)
    return render_page(request, "Dashboard", dashboard_body(stats), banner)
