"""HTML rendering for pages and the authenticated layout shell."""

from collections.abc import Iterable
from datetime import date
from html import escape
from urllib.parse import quote

from fastapi.responses import HTMLResponse

from sales_tracker.domain.clients import ClientChoice, ClientRecord
from sales_tracker.domain.dashboard import DashboardStats
from sales_tracker.domain.models import SessionUser
from sales_tracker.domain.sales import SaleDetail, SaleFilters, SaleSummary
from sales_tracker.services.banner import Banner
from sales_tracker.services.validation import FieldError

NAVIGATION = (
    ("Dashboard", "/"),
    ("Clientes", "/clients"),
    ("Vendas", "/sales"),
)

_STYLE = """
body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 0;
       background: #111827; color: #f3f4f6; }
a { color: #93c5fd; }
.shell { display: flex; min-height: 100vh; }
.sidebar { width: 16rem; background: #1f2937; padding: 1rem; }
.sidebar a { display: block; padding: 0.5rem; text-decoration: none; }
.sidebar a.active { background: #374151; border-radius: 0.375rem; }
.main { flex: 1; padding: 1.5rem; }
.navbar { display: flex; justify-content: space-between; margin-bottom: 1rem; }
.banner { padding: 0.75rem; border-radius: 0.375rem; margin-bottom: 1rem; }
.banner.error { background: #7f1d1d; }
.banner.success { background: #14532d; }
.field-error { color: #fca5a5; font-size: 0.875rem; }
.card { background: #1f2937; padding: 1rem; border-radius: 0.5rem; }
.stats { display: grid; grid-template-columns: repeat(4, 1fr); gap: 1rem; }
table { width: 100%; border-collapse: collapse; }
td, th { padding: 0.5rem; border-bottom: 1px solid #374151; text-align: left; }
.photos img { max-width: 12rem; margin: 0.25rem; }
@media (max-width: 768px) {
  .sidebar { display: none; }
  .sidebar.open { display: block; position: fixed; inset: 0 auto 0 0; z-index: 30; }
}
"""


def page_response(title: str, body: str, status_code: int = 200) -> HTMLResponse:
    """Wrap a body in a complete HTML document."""
    document = (
        "<!doctype html>\n<html lang=\"pt-BR\">\n<head>\n"
        '<meta charset="utf-8" />\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1" />\n'
        f"<title>{escape(title)} · Vendas</title>\n<style>{_STYLE}</style>\n"
        f"</head>\n<body>\n{body}\n</body>\n</html>\n"
    )
    return HTMLResponse(document, status_code=status_code)


def loading_response() -> HTMLResponse:
    """Blocking placeholder shown while the session is being restored."""
    body = (
        '<meta http-equiv="refresh" content="1" />'
        '<div class="main"><p role="status">Carregando...</p></div>'
    )
    return page_response("Carregando", body)


def layout_response(  # noqa: PLR0913
    title: str,
    body: str,
    *,
    user: SessionUser,
    current_path: str,
    menu_open: bool,
    banner: Banner | None = None,
    show_debug: bool = False,
) -> HTMLResponse:
    """Render a page inside the sidebar and navbar chrome."""
    links = []
    for name, href in NAVIGATION:
        active = " active" if _is_active(href, current_path) else ""
        target = f"/menu/close?next={quote(href)}" if menu_open else href
        links.append(f'<a class="nav{active}" href="{target}">{escape(name)}</a>')
    sidebar_class = "sidebar open" if menu_open else "sidebar"
    backdrop = (
        f'<form method="post" action="/menu/close?next={quote(current_path)}">'
        '<button type="submit" aria-label="Fechar menu">×</button></form>'
        if menu_open
        else ""
    )
    who = escape(user.display_name or user.email or "")
    shell = (
        '<div class="shell">'
        f'<aside class="{sidebar_class}"><strong>Vendas</strong>'
        f"{''.join(links)}{backdrop}</aside>"
        '<div class="main">'
        '<nav class="navbar">'
        f'<form method="post" action="/menu/toggle?next={quote(current_path)}">'
        '<button type="submit" aria-label="Menu">☰</button></form>'
        f"<span>{who}</span>"
        '<form method="post" action="/logout"><button type="submit">Sair</button>'
        "</form></nav>"
        f"{banner_html(banner, show_debug)}<main>{body}</main>"
        "</div></div>"
    )
    return page_response(title, shell)


def public_response(
    title: str, body: str, banner: Banner | None = None, show_debug: bool = False
) -> HTMLResponse:
    """Render one of the public auth screens."""
    content = (
        '<div class="main" style="max-width: 28rem; margin: 0 auto;">'
        f"<h1>{escape(title)}</h1>{banner_html(banner, show_debug)}{body}</div>"
    )
    return page_response(title, content)


def banner_html(banner: Banner | None, show_debug: bool = False) -> str:
    if banner is None:
        return ""
    message = banner.message
    if show_debug and banner.detail:
        message = f"{message} (debug: {banner.detail})"
    return f'<div class="banner {escape(banner.kind)}" role="alert">{escape(message)}</div>'


def login_body(email: str, errors: list[FieldError]) -> str:
    return (
        '<p>Faça login para acessar sua conta</p><form method="post" action="/login">'
        f"{_input('email', 'Email', email, errors, kind='email')}"
        f"{_input('password', 'Senha', '', errors, kind='password')}"
        '<p><a href="/forgot-password">Esqueceu sua senha?</a></p>'
        '<button type="submit">Entrar</button></form>'
        '<p>Não tem uma conta? <a href="/register">Registrar</a></p>'
    )


def register_body(full_name: str, email: str, errors: list[FieldError]) -> str:
    return (
        '<p>Crie sua conta para começar</p><form method="post" action="/register">'
        f"{_input('full_name', 'Nome completo', full_name, errors)}"
        f"{_input('email', 'Email', email, errors, kind='email')}"
        f"{_input('password', 'Senha', '', errors, kind='password')}"
        f"{_input('confirm_password', 'Confirmar senha', '', errors, kind='password')}"
        '<button type="submit">Criar Conta</button></form>'
        '<p>Já tem uma conta? <a href="/login">Login</a></p>'
    )


def forgot_password_body(email: str, errors: list[FieldError]) -> str:
    return (
        "<p>Enviaremos um link para redefinir sua senha</p>"
        '<form method="post" action="/forgot-password">'
        f"{_input('email', 'Email', email, errors, kind='email')}"
        '<button type="submit">Enviar link</button></form>'
        '<p><a href="/login">Voltar para o login</a></p>'
    )


def dashboard_body(stats: DashboardStats) -> str:
    cards = (
        ("Total de Clientes", stats.total_clients),
        ("Total de Vendas", stats.total_sales),
        ("Vendas Concluídas", stats.completed_sales),
        ("Vendas Pendentes", stats.pending_sales),
    )
    items = "".join(
        f'<div class="card"><p>{escape(label)}</p><strong>{value}</strong></div>'
        for label, value in cards
    )
    return (
        f'<h1>Dashboard</h1><div class="stats">{items}</div>'
        '<p><a href="/clients/new">Novo Cliente</a> · '
        '<a href="/sales/new">Nova Venda</a></p>'
    )


def clients_body(  # noqa: PLR0913
    clients: list[ClientRecord],
    search_term: str,
    editing: ClientRecord | None,
    edit_values: dict[str, str] | None,
    errors: list[FieldError],
    pending_delete: ClientRecord | None,
) -> str:
    header = (
        '<h1>Clientes</h1><p><a href="/clients/new">Novo Cliente</a></p>'
        '<form method="get" action="/clients">'
        f'<input type="text" name="q" value="{escape(search_term)}" '
        'placeholder="Buscar cliente por nome..." />'
        '<button type="submit">Buscar</button></form>'
    )
    if pending_delete is not None:
        header += confirm_html(
            "Tem certeza que deseja excluir este cliente? "
            "Esta ação não pode ser desfeita.",
            action=f"/clients/{pending_delete.id}/delete",
            cancel_href="/clients",
        )
    if not clients:
        empty = (
            "Nenhum cliente corresponde à sua busca"
            if search_term
            else "Comece adicionando seu primeiro cliente"
        )
        return f'{header}<p>{empty}</p><a href="/clients/new">Adicionar Cliente</a>'

    rows = []
    for client in clients:
        if editing is not None and editing.id == client.id:
            rows.append(_client_edit_row(client, edit_values, errors))
            continue
        rows.append(
            "<tr>"
            f"<td>{escape(client.name)}</td>"
            f"<td>{escape(client.email or '-')}</td>"
            f"<td>{escape(client.phone or '-')}</td>"
            f'<td><a href="/clients/{client.id}/edit" title="Editar">Editar</a> '
            f'<a href="/clients/{client.id}/delete" title="Excluir">Excluir</a></td>'
            "</tr>"
        )
    return (
        f"{header}<table><thead><tr><th>Nome</th><th>Email</th><th>Telefone</th>"
        f"<th>Ações</th></tr></thead><tbody>{''.join(rows)}</tbody></table>"
    )


def new_client_body(values: dict[str, str], errors: list[FieldError]) -> str:
    return (
        '<p><a href="/clients">← Voltar</a></p><h1>Novo Cliente</h1>'
        '<form method="post" action="/clients/new">'
        f"{_input('name', 'Nome', values.get('name', ''), errors)}"
        f"{_input('email', 'Email', values.get('email', ''), errors, kind='email')}"
        f"{_input('phone', 'Telefone', values.get('phone', ''), errors)}"
        '<a href="/clients">Cancelar</a> <button type="submit">Salvar</button></form>'
    )


def sales_body(sales: list[SaleSummary], filters: SaleFilters) -> str:
    status = "" if filters.completed is None else str(filters.completed).lower()
    options = "".join(
        f'<option value="{value}"{" selected" if value == status else ""}>'
        f"{label}</option>"
        for value, label in (("", "Todas"), ("true", "Concluídas"), ("false", "Pendentes"))
    )
    header = (
        '<h1>Vendas</h1><p><a href="/sales/new">Nova Venda</a></p>'
        '<form method="get" action="/sales">'
        f'<input type="text" name="q" value="{escape(filters.search)}" '
        'placeholder="Buscar por cliente ou Instagram..." />'
        f'<select name="status">{options}</select>'
        f'<input type="date" name="start" value="{_date_value(filters.start_date)}" />'
        f'<input type="date" name="end" value="{_date_value(filters.end_date)}" />'
        '<button type="submit">Filtrar</button> '
        '<a href="/sales">Limpar filtros</a></form>'
    )
    if not sales:
        return f"{header}<p>Nenhuma venda encontrada</p>"
    rows = "".join(
        "<tr>"
        f'<td><a href="/sales/{sale.id}">{format_date(sale.sale_date)}</a></td>'
        f"<td>{escape(sale.client_name or '-')}</td>"
        f"<td>{escape(sale.instagram or '-')}</td>"
        f"<td>{'Concluída' if sale.is_completed else 'Pendente'}</td>"
        "</tr>"
        for sale in sales
    )
    return (
        f"{header}<table><thead><tr><th>Data</th><th>Cliente</th><th>Instagram</th>"
        f"<th>Status</th></tr></thead><tbody>{rows}</tbody></table>"
    )


def new_sale_body(  # noqa: PLR0913
    clients: list[ClientChoice],
    client_search: str,
    values: dict[str, str],
    draft_tokens: Iterable[str],
    errors: list[FieldError],
    progress: int,
) -> str:
    selected = values.get("client_id", "")
    options = '<option value="">Selecione um cliente</option>' + "".join(
        f'<option value="{client.id}"'
        f'{" selected" if str(client.id) == selected else ""}>'
        f"{escape(client.name)}</option>"
        for client in clients
    )
    return (
        '<p><a href="/sales">← Voltar</a></p><h1>Nova Venda</h1>'
        '<form method="post" action="/sales/new" enctype="multipart/form-data">'
        f'<input type="text" name="client_q" value="{escape(client_search)}" '
        'placeholder="Buscar cliente..." />'
        '<button type="submit" name="action" value="search">Buscar</button>'
        f'<label for="client_id">Cliente</label><select id="client_id" '
        f'name="client_id">{options}</select>{_error_for("client_id", errors)}'
        f"{_input('sale_date', 'Data da venda', values.get('sale_date', ''), errors, kind='date')}"
        f"{_input('instagram', 'Instagram', values.get('instagram', ''), errors)}"
        f"{_textarea('notes', 'Observações', values.get('notes', ''))}"
        f"{_draft_html('/sales/new/photos', draft_tokens)}"
        '<input type="file" name="photos" accept="image/*" multiple />'
        f'{_error_for("photos", errors)}'
        f"{_progress_html(progress)}"
        '<button type="submit" name="action" value="attach">Anexar fotos</button> '
        '<button type="submit" name="action" value="save">Salvar Venda</button>'
        "</form>"
        '<form method="post" action="/sales/new/discard">'
        '<button type="submit">Cancelar</button></form>'
    )


def sale_detail_body(  # noqa: PLR0913
    sale: SaleDetail | None,
    *,
    editing: bool,
    values: dict[str, object] | None,
    draft_tokens: Iterable[str],
    errors: list[FieldError],
    progress: int,
    confirm_delete: bool,
) -> str:
    back = '<p><a href="/sales">← Voltar para Vendas</a></p>'
    if sale is None:
        return f"{back}<h1>Venda não encontrada</h1>"

    status = "Concluída" if sale.is_completed else "Pendente"
    client = escape(sale.client.name) if sale.client else "-"
    photos = "".join(
        '<figure>'
        + (f'<img src="{escape(photo.url)}" alt="Foto da venda" />' if photo.url else "")
        + (
            f'<form method="post" action="/sales/{sale.id}/photos/{photo.id}/delete">'
            '<button type="submit">Excluir foto</button></form>'
            if editing
            else ""
        )
        + "</figure>"
        for photo in sale.photos
    )
    header = (
        f"{back}<h1>Venda de {format_date(sale.sale_date)}</h1>"
        f"<p>Cliente: {client}</p><p>Status: {status}</p>"
    )
    if confirm_delete:
        header += confirm_html(
            "Tem certeza que deseja excluir esta venda? "
            "Esta ação não pode ser desfeita.",
            action=f"/sales/{sale.id}/delete",
            cancel_href=f"/sales/{sale.id}",
        )
    if not editing:
        return (
            f"{header}<p>Instagram: {escape(sale.instagram or '-')}</p>"
            f"<p>Observações: {escape(sale.notes or '-')}</p>"
            f'<div class="photos">{photos}</div>'
            f'<p><a href="/sales/{sale.id}/edit">Editar</a> '
            f'<a href="/sales/{sale.id}/delete">Excluir</a></p>'
        )

    current = values or {
        "sale_date": sale.sale_date.isoformat(),
        "instagram": sale.instagram or "",
        "notes": sale.notes or "",
        "is_completed": sale.is_completed,
    }
    checked = " checked" if current.get("is_completed") else ""
    return (
        f'{header}<div class="photos">{photos}</div>'
        f'<form method="post" action="/sales/{sale.id}" '
        'enctype="multipart/form-data">'
        f"{_input('sale_date', 'Data da venda', str(current.get('sale_date', '')), errors, kind='date')}"
        f"{_input('instagram', 'Instagram', str(current.get('instagram', '')), errors)}"
        f'<label><input type="checkbox" name="is_completed" value="true"{checked} />'
        " Marcar como concluída</label>"
        f"{_textarea('notes', 'Observações', str(current.get('notes', '')))}"
        f"{_draft_html(f'/sales/{sale.id}/drafts', draft_tokens)}"
        '<input type="file" name="photos" accept="image/*" multiple />'
        f"{_progress_html(progress)}"
        '<button type="submit" name="action" value="attach">Anexar fotos</button> '
        '<button type="submit" name="action" value="cancel">Cancelar</button> '
        '<button type="submit" name="action" value="save">Salvar</button>'
        "</form>"
    )


def confirm_html(message: str, action: str, cancel_href: str) -> str:
    """Interactive confirmation step for destructive actions."""
    return (
        f'<div class="card" role="dialog"><p>{escape(message)}</p>'
        f'<form method="post" action="{escape(action)}">'
        '<input type="hidden" name="confirmed" value="true" />'
        f'<a href="{escape(cancel_href)}">Cancelar</a> '
        '<button type="submit">Excluir</button></form></div>'
    )


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def _is_active(href: str, current_path: str) -> bool:
    if href == "/":
        return current_path == "/"
    return current_path.startswith(href)


def _client_edit_row(
    client: ClientRecord, values: dict[str, str] | None, errors: list[FieldError]
) -> str:
    current = values or {
        "name": client.name,
        "email": client.email or "",
        "phone": client.phone or "",
    }
    return (
        '<tr><td colspan="4">'
        f'<form method="post" action="/clients/{client.id}/edit">'
        f"{_input('name', 'Nome', current.get('name', ''), errors)}"
        f"{_input('email', 'Email', current.get('email', ''), errors, kind='email')}"
        f"{_input('phone', 'Telefone', current.get('phone', ''), errors)}"
        '<button type="submit">Salvar</button></form>'
        '<form method="post" action="/clients/edit/cancel">'
        '<button type="submit">Cancelar</button></form>'
        "</td></tr>"
    )


def _input(
    name: str,
    label: str,
    value: str,
    errors: list[FieldError],
    kind: str = "text",
) -> str:
    return (
        f'<div><label for="{name}">{escape(label)}</label>'
        f'<input id="{name}" name="{name}" type="{kind}" value="{escape(value)}" />'
        f"{_error_for(name, errors)}</div>"
    )


def _textarea(name: str, label: str, value: str) -> str:
    return (
        f'<div><label for="{name}">{escape(label)}</label>'
        f'<textarea id="{name}" name="{name}">{escape(value)}</textarea></div>'
    )


def _error_for(name: str, errors: list[FieldError]) -> str:
    for error in errors:
        if error.field == name:
            return f'<p class="field-error">{escape(error.message)}</p>'
    return ""


def _draft_html(base: str, tokens: Iterable[str]) -> str:
    items = "".join(
        f'<figure><img src="{base}/{token}" alt="Prévia" />'
        f'<button type="submit" name="action" value="remove:{token}">Remover</button>'
        "</figure>"
        for token in tokens
    )
    return f'<div class="photos">{items}</div>' if items else ""


def _progress_html(progress: int) -> str:
    if progress <= 0:
        return ""
    return f'<progress max="100" value="{progress}">{progress}%</progress>'


def _date_value(value: date | None) -> str:
    return value.isoformat() if value else ""
