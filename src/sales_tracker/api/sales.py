"""Sales list, new-sale form and sale details pages."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Request,
    Response,
    status,
)
from fastapi.responses import HTMLResponse, RedirectResponse

from sales_tracker.api.common import (
    get_container,
    read_uploads,
    render_page,
    require_owner,
    see_other,
    text_fields,
)
from sales_tracker.api.views import new_sale_body, sale_detail_body, sales_body
from sales_tracker.domain.sales import SaleFilters

if TYPE_CHECKING:
    from sales_tracker.domain.sales import PhotoUpload
    from sales_tracker.services.sales import SaleDetailsPage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["sales"])

SALES_PATH = "/sales"
_REMOVE_PREFIX = "remove:"
_STATUS_FILTERS = {"true": True, "false": False}


def parse_filters(q: str, status_filter: str, start: str, end: str) -> SaleFilters:
    """Build list filters from query parameters; malformed dates are ignored."""
    return SaleFilters(
        search=q.strip(),
        completed=_STATUS_FILTERS.get(status_filter),
        start_date=_parse_date(start),
        end_date=_parse_date(end),
    )


def _parse_date(value: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.info("Ignoring malformed date filter %r", value)
        return None


def _preview(upload: PhotoUpload | None) -> Response:
    if upload is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return Response(
        upload.content, media_type=upload.content_type or "application/octet-stream"
    )


def _ensure_sale(page: SaleDetailsPage, owner: UUID, sale_id: UUID) -> None:
    if page.sale is None or page.sale.id != sale_id:
        page.load(owner, sale_id)


def _render_details(
    request: Request,
    page: SaleDetailsPage,
    values: dict[str, object] | None = None,
    confirm_delete: bool = False,
) -> HTMLResponse | RedirectResponse:
    body = sale_detail_body(
        page.sale,
        editing=page.editing,
        values=values,
        draft_tokens=page.draft.tokens,
        errors=page.field_errors,
        progress=page.progress,
        confirm_delete=confirm_delete,
    )
    return render_page(request, "Detalhes da Venda", body, page.banner)


@router.get("", response_model=None)
async def list_sales(  # noqa: PLR0913
    request: Request,
    q: str = "",
    status_filter: str = Query(default="", alias="status"),
    start: str = "",
    end: str = "",
    owner: UUID = Depends(require_owner),
) -> HTMLResponse | RedirectResponse:
    """List sales; every filter change runs a fresh query."""
    page = get_container(request).sales_page
    filters = parse_filters(q, status_filter, start, end)
    if filters == SaleFilters():
        page.clear_filters(owner)
    else:
        page.apply_filters(owner, filters)
    return render_page(
        request, "Vendas", sales_body(page.sales, page.filters), page.banner
    )


@router.get("/new", response_model=None)
async def new_sale_page(
    request: Request, client_q: str = "", owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Start a fresh sale form; staged photos of an abandoned form are dropped."""
    page = get_container(request).new_sale_page
    page.mount(owner)
    if client_q.strip():
        page.search_clients(owner, client_q.strip())
    values = {"sale_date": date.today().isoformat()}
    body = new_sale_body(
        page.clients, page.client_search, values, page.draft.tokens, [], 0
    )
    return render_page(request, "Nova Venda", body, page.banner)


@router.post("/new", response_model=None)
async def submit_new_sale(
    request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Stage photos, search clients, or save the sale with its photos."""
    page = get_container(request).new_sale_page
    form = await request.form()
    values = text_fields(form)
    action = values.get("action", "save")
    page.attach(await read_uploads(form))

    if action == "search":
        page.search_clients(owner, values.get("client_q", "").strip())
    elif action.startswith(_REMOVE_PREFIX):
        page.remove(action.removeprefix(_REMOVE_PREFIX))
    elif action == "save":
        sale = page.submit(owner, values)
        if sale is not None:
            return see_other(SALES_PATH)

    body = new_sale_body(
        page.clients,
        page.client_search,
        values,
        page.draft.tokens,
        page.field_errors,
        page.progress,
    )
    return render_page(request, "Nova Venda", body, page.banner)


@router.get("/new/photos/{token}")
async def new_sale_preview(token: str, request: Request) -> Response:
    return _preview(get_container(request).new_sale_page.draft.preview(token))


@router.post("/new/discard")
async def discard_new_sale(request: Request) -> RedirectResponse:
    """Abandon the form and release its staged photos."""
    get_container(request).new_sale_page.discard()
    return see_other(SALES_PATH)


@router.get("/{sale_id}", response_model=None)
async def sale_details(
    sale_id: UUID, request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Show a sale with its client and signed photo URLs."""
    page = get_container(request).sale_details_page
    page.load(owner, sale_id)
    if page.editing:
        page.cancel_edit()
    return _render_details(request, page)


@router.get("/{sale_id}/edit", response_model=None)
async def edit_sale_page(
    sale_id: UUID, request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    page = get_container(request).sale_details_page
    page.load(owner, sale_id)
    page.begin_edit()
    return _render_details(request, page)


@router.post("/{sale_id}", response_model=None)
async def submit_sale_edit(
    sale_id: UUID, request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Stage photos, cancel, or save the edit form."""
    page = get_container(request).sale_details_page
    _ensure_sale(page, owner, sale_id)
    form = await request.form()
    fields = text_fields(form)
    action = fields.get("action", "save")
    if action == "cancel":
        page.cancel_edit()
        return see_other(f"{SALES_PATH}/{sale_id}")

    if not page.editing:
        page.begin_edit()
    page.attach(await read_uploads(form))
    if action.startswith(_REMOVE_PREFIX):
        page.remove(action.removeprefix(_REMOVE_PREFIX))
    elif action == "save" and page.save(owner, fields):
        return _render_details(request, page)
    return _render_details(request, page, values=dict(fields))


@router.get("/{sale_id}/drafts/{token}")
async def sale_draft_preview(sale_id: UUID, token: str, request: Request) -> Response:
    page = get_container(request).sale_details_page
    if page.sale is None or page.sale.id != sale_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return _preview(page.draft.preview(token))


@router.post("/{sale_id}/photos/{photo_id}/delete", response_model=None)
async def delete_sale_photo(
    sale_id: UUID,
    photo_id: UUID,
    request: Request,
    owner: UUID = Depends(require_owner),
) -> HTMLResponse | RedirectResponse:
    """Remove a stored photo, then its record."""
    page = get_container(request).sale_details_page
    _ensure_sale(page, owner, sale_id)
    page.delete_photo(owner, photo_id)
    return _render_details(request, page)


@router.get("/{sale_id}/delete", response_model=None)
async def confirm_delete_sale(
    sale_id: UUID, request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Ask for confirmation before deleting the sale."""
    page = get_container(request).sale_details_page
    _ensure_sale(page, owner, sale_id)
    return _render_details(request, page, confirm_delete=page.sale is not None)


@router.post("/{sale_id}/delete", response_model=None)
async def delete_sale(
    sale_id: UUID, request: Request, owner: UUID = Depends(require_owner)
) -> HTMLResponse | RedirectResponse:
    """Delete the sale and its stored photos once confirmed."""
    page = get_container(request).sale_details_page
    _ensure_sale(page, owner, sale_id)
    form = await request.form()
    if page.delete_sale(owner, confirmed=form.get("confirmed") == "true"):
        return see_other(SALES_PATH)
    return _render_details(request, page)
