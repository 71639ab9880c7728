"""Public auth screens: login, registration and password reset."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from sales_tracker.api.common import get_container, see_other, show_debug, text_fields
from sales_tracker.api.views import (
    forgot_password_body,
    login_body,
    public_response,
    register_body,
)
from sales_tracker.forms import ForgotPasswordForm, LoginForm, RegisterForm
from sales_tracker.services.banner import Banner
from sales_tracker.services.routing import HOME_PATH, LOGIN_PATH
from sales_tracker.services.session_store import (
    RESET_FAILED_MESSAGE,
    SIGN_UP_FAILED_MESSAGE,
    sign_in_error_message,
)
from sales_tracker.services.validation import ValidationFailed, parse_form

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

REGISTERED_MESSAGE = "Conta criada com sucesso! Você já pode fazer login."
CONFIRM_EMAIL_MESSAGE = (
    "Conta criada! Verifique seu email para confirmar o cadastro antes de fazer login."
)
RESET_SENT_MESSAGE = "Link para redefinição de senha enviado. Verifique seu email."


@router.get("/login", response_class=HTMLResponse)
async def login_page() -> HTMLResponse:
    return public_response("Login", login_body("", []))


@router.post("/login", response_model=None)
async def login(request: Request) -> HTMLResponse | RedirectResponse:
    """Sign in and go to the dashboard."""
    container = get_container(request)
    values = text_fields(await request.form())
    try:
        form = parse_form(LoginForm, values)
    except ValidationFailed as exc:
        return public_response("Login", login_body(values.get("email", ""), exc.errors))

    result = container.session_store.sign_in(form.email, form.password)
    if not result.ok:
        banner = Banner(sign_in_error_message(result.error or ""))
        return public_response(
            "Login", login_body(form.email, []), banner, show_debug(container)
        )
    return see_other(HOME_PATH)


@router.get("/register", response_class=HTMLResponse)
async def register_page() -> HTMLResponse:
    return public_response("Criar Conta", register_body("", "", []))


@router.post("/register", response_class=HTMLResponse)
async def register(request: Request) -> HTMLResponse:
    """Create an account, storing the full name as user metadata."""
    container = get_container(request)
    values = text_fields(await request.form())
    try:
        form = parse_form(RegisterForm, values)
    except ValidationFailed as exc:
        body = register_body(
            values.get("full_name", ""), values.get("email", ""), exc.errors
        )
        return public_response("Criar Conta", body)

    result = container.session_store.sign_up(form.email, form.password, form.full_name)
    if not result.ok:
        banner = Banner(result.error or SIGN_UP_FAILED_MESSAGE)
        return public_response(
            "Criar Conta", register_body(form.full_name, form.email, []), banner
        )
    message = (
        CONFIRM_EMAIL_MESSAGE if result.requires_confirmation else REGISTERED_MESSAGE
    )
    return public_response(
        "Criar Conta", register_body("", "", []), Banner.success(message)
    )


@router.get("/forgot-password", response_class=HTMLResponse)
async def forgot_password_page() -> HTMLResponse:
    return public_response("Recuperar Senha", forgot_password_body("", []))


@router.post("/forgot-password", response_class=HTMLResponse)
async def forgot_password(request: Request) -> HTMLResponse:
    """Ask the identity provider to send a reset link."""
    container = get_container(request)
    values = text_fields(await request.form())
    try:
        form = parse_form(ForgotPasswordForm, values)
    except ValidationFailed as exc:
        return public_response(
            "Recuperar Senha", forgot_password_body(values.get("email", ""), exc.errors)
        )

    result = container.session_store.reset_password(form.email)
    if not result.ok:
        banner = Banner(result.error or RESET_FAILED_MESSAGE)
        return public_response(
            "Recuperar Senha", forgot_password_body(form.email, []), banner
        )
    return public_response(
        "Recuperar Senha",
        forgot_password_body("", []),
        Banner.success(RESET_SENT_MESSAGE),
    )


@router.post("/logout")
async def logout(request: Request) -> RedirectResponse:
    """Sign out; the session event closes the menu and drops staged photos."""
    container = get_container(request)
    result = container.session_store.sign_out()
    if not result.ok:
        logger.warning("Sign-out did not complete: %s", result.error)
    return see_other(LOGIN_PATH)
