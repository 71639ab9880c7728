"""Mobile menu actions."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from sales_tracker.api.common import get_container, safe_next, see_other

router = APIRouter(prefix="/menu", tags=["navigation"])


@router.post("/toggle")
async def toggle_menu(request: Request, next: str | None = None) -> RedirectResponse:  # noqa: A002
    get_container(request).mobile_menu.toggle()
    return see_other(safe_next(next))


@router.api_route("/close", methods=["GET", "POST"])
async def close_menu(request: Request, next: str | None = None) -> RedirectResponse:  # noqa: A002
    """Close the menu, then follow the navigation link that was clicked."""
    get_container(request).mobile_menu.close()
    return see_other(safe_next(next))
