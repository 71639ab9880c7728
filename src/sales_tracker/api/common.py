"""Helpers shared by the HTML routers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.datastructures import FormData, UploadFile

from sales_tracker.api.views import layout_response
from sales_tracker.domain.sales import PhotoUpload
from sales_tracker.services.routing import LOGIN_PATH

if TYPE_CHECKING:
    from uuid import UUID

    from sales_tracker.containers import AppContainer
    from sales_tracker.services.banner import Banner


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def see_other(location: str) -> RedirectResponse:
    """Redirect after a form post without keeping the post in history."""
    return RedirectResponse(location, status_code=303)


def owner_id(container: AppContainer) -> UUID | None:
    user = container.session_store.user
    return user.id if user is not None else None


async def require_owner(request: Request) -> UUID:
    """Return the signed-in user id or send the visitor to the login page."""
    owner = owner_id(get_container(request))
    if owner is None:
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER, headers={"Location": LOGIN_PATH}
        )
    return owner


def show_debug(container: AppContainer) -> bool:
    return container.settings.environment == "local"


def render_page(
    request: Request,
    title: str,
    body: str,
    banner: Banner | None = None,
) -> HTMLResponse | RedirectResponse:
    """Render a body inside the authenticated layout."""
    container = get_container(request)
    user = container.session_store.user
    if user is None:
        return see_other(LOGIN_PATH)
    return layout_response(
        title,
        body,
        user=user,
        current_path=request.url.path,
        menu_open=container.mobile_menu.is_open,
        banner=banner,
        show_debug=show_debug(container),
    )


def text_fields(form: FormData) -> dict[str, str]:
    """Return the plain text fields of a submitted form."""
    return {key: value for key, value in form.items() if isinstance(value, str)}


async def read_uploads(form: FormData, field: str = "photos") -> list[PhotoUpload]:
    """Read the files posted under `field`, skipping empty file inputs."""
    uploads: list[PhotoUpload] = []
    for item in form.getlist(field):
        if not isinstance(item, UploadFile) or not item.filename:
            continue
        content = await item.read()
        if not content:
            continue
        uploads.append(
            PhotoUpload(
                filename=item.filename,
                content=content,
                content_type=item.content_type,
            )
        )
    return uploads


def safe_next(value: str | None, default: str = "/") -> str:
    """Only allow local absolute paths as redirect targets."""
    if not value or not value.startswith("/") or value.startswith("//"):
        return default
    return value
