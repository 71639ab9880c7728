"""Client list, creation, inline edit and deletion pages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from sales_tracker.api.common import (
    get_container,
    render_page,
    require_owner,
    see_other,
    text_fields,
)
from sales_tracker.api.views import clients_body, new_client_body
from sales_tracker.services.banner import Banner
from sales_tracker.services.validation import ValidationFailed

if TYPE_CHECKING:
    from sales_tracker.services.clients import ClientsPage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["clients"])

CLIENTS_PATH = "/clients"


def _render_list(
    request: Request,
    page: ClientsPage,
    edit_values: dict[str, str] | None = None,
) -> HTMLResponse | RedirectResponse:
    body = clients_body(
        page.clients,
        page.search_term,
        page.editing,
        edit_values,
        page.field_errors,
        page.pending_delete,
    )
    return render_page(request, "Clientes", body, page.banner)


def _select(page: ClientsPage, owner: UUID, client_id: UUID) -> bool:
    """Capture a row for editing, reloading the list if it is not in memory."""
    if page.begin_edit(client_id):
        return True
    page.load(owner, page.search_term)
    return page.begin_edit(client_id)


@router.get("", response_model=None)
async def list_clients(
    request: Request, q: str = "", owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """List the owner's clients, optionally filtered by name."""
    page = get_container(request).clients_page
    page.load(owner, q.strip())
    return _render_list(request, page)


@router.get("/new", response_model=None)
async def new_client_page(request: Request) -> HTMLResponse | RedirectResponse:
    return render_page(request, "Novo Cliente", new_client_body({}, []))


@router.post("/new", response_model=None)
async def create_client(
    request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Validate and insert a client, then return to the list."""
    container = get_container(request)
    values = text_fields(await request.form())
    try:
        container.client_service.create_client(owner, values)
    except ValidationFailed as exc:
        return render_page(request, "Novo Cliente", new_client_body(values, exc.errors))
    except Exception as exc:
        logger.exception("Failed to create client")
        banner = Banner.from_exception("Ocorreu um erro ao criar o cliente.", exc)
        return render_page(request, "Novo Cliente", new_client_body(values, []), banner)
    return see_other(CLIENTS_PATH)


@router.post("/edit/cancel", response_model=None)
async def cancel_edit(request: Request) -> HTMLResponse | RedirectResponse:
    page = get_container(request).clients_page
    page.cancel_edit()
    return _render_list(request, page)


@router.get("/{client_id}/edit", response_model=None)
async def edit_client_page(
    client_id: UUID, request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    page = get_container(request).clients_page
    if not _select(page, owner, client_id):
        return see_other(CLIENTS_PATH)
    return _render_list(request, page)


@router.post("/{client_id}/edit", response_model=None)
async def update_client(
    client_id: UUID, request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Save the inline edit and patch only that row."""
    page = get_container(request).clients_page
    if (page.editing is None or page.editing.id != client_id) and not _select(
        page, owner, client_id
    ):
        return see_other(CLIENTS_PATH)
    values = text_fields(await request.form())
    if page.save_edit(owner, values):
        return _render_list(request, page)
    return _render_list(request, page, edit_values=values)


@router.get("/{client_id}/delete", response_model=None)
async def confirm_delete_client(
    client_id: UUID, request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Ask for confirmation before deleting."""
    page = get_container(request).clients_page
    if not page.request_delete(client_id):
        page.load(owner, page.search_term)
        if not page.request_delete(client_id):
            return see_other(CLIENTS_PATH)
    return _render_list(request, page)


@router.post("/{client_id}/delete", response_model=None)
async def delete_client(
    client_id: UUID, request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Delete a client once the confirmation form was submitted."""
    page = get_container(request).clients_page
    form = await request.form()
    page.delete(owner, client_id, confirmed=form.get("confirmed") == "true")
    return _render_list(request, page)
