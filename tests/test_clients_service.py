"""Tests for the client service and the clients page state."""

from uuid import uuid4

import pytest

from sales_tracker.services.clients import ClientService, ClientsPage
from sales_tracker.services.validation import ValidationFailed
from tests.conftest import InMemoryClientRepository


def test_create_client_with_only_a_name(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    owner_id = uuid4()

    created = client_service.create_client(owner_id, {"name": "  Maria  "})

    assert created.name == "Maria"
    assert created.email is None
    assert created.phone is None
    assert created.user_id == owner_id
    assert client_repository.clients == [created]


def test_create_client_without_name_never_calls_repository(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        client_service.create_client(uuid4(), {"email": "maria@example.com"})

    assert excinfo.value.for_field("name") == "Nome é obrigatório"
    assert client_repository.calls == []


def test_list_choices_uses_recent_clients_or_name_search(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    owner_id = uuid4()
    for index in range(12):
        client_repository.add(owner_id, f"Cliente {index:02d}")
    client_repository.add(owner_id, "Zélia")

    recent = client_service.list_choices(owner_id)
    matches = client_service.list_choices(owner_id, "cliente 1")

    assert len(recent) == 10
    assert recent[0].name == "Zélia"
    assert [c.name for c in matches] == ["Cliente 10", "Cliente 11"]


def test_load_replaces_list_and_filters_by_name(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    owner_id = uuid4()
    client_repository.add(owner_id, "Maria")
    client_repository.add(owner_id, "João")
    client_repository.add(uuid4(), "Maria de outro dono")
    page = ClientsPage(client_service)

    page.load(owner_id)
    assert [c.name for c in page.clients] == ["João", "Maria"]

    page.load(owner_id, "mar")
    assert [c.name for c in page.clients] == ["Maria"]
    assert page.search_term == "mar"


def test_save_edit_patches_only_the_edited_row(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    owner_id = uuid4()
    first = client_repository.add(owner_id, "Maria")
    second = client_repository.add(owner_id, "João")
    page = ClientsPage(client_service)
    page.load(owner_id)
    client_repository.calls.clear()

    assert page.begin_edit(first.id)
    saved = page.save_edit(
        owner_id, {"name": "Maria Silva", "email": "maria@example.com", "phone": ""}
    )

    assert saved is True
    assert page.editing is None
    assert [c.id for c in page.clients] == [second.id, first.id]
    assert page.clients[0] == second
    assert page.clients[1].name == "Maria Silva"
    assert page.clients[1].email == "maria@example.com"
    assert page.clients[1].phone is None
    assert client_repository.calls == ["update_client"]


def test_save_edit_with_invalid_form_keeps_list(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    owner_id = uuid4()
    client = client_repository.add(owner_id, "Maria")
    page = ClientsPage(client_service)
    page.load(owner_id)
    page.begin_edit(client.id)

    saved = page.save_edit(owner_id, {"name": "M"})

    assert saved is False
    assert page.editing == client
    assert page.field_errors[0].field == "name"
    assert page.clients == [client]


def test_save_edit_failure_sets_banner(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    owner_id = uuid4()
    client = client_repository.add(owner_id, "Maria")
    page = ClientsPage(client_service)
    page.load(owner_id)
    page.begin_edit(client.id)
    client_repository.fail_on.add("update_client")

    saved = page.save_edit(owner_id, {"name": "Maria Silva"})

    assert saved is False
    assert page.banner is not None
    assert page.banner.message == "Erro ao atualizar cliente"
    assert page.clients == [client]


def test_cancel_edit_discards_capture(client_service: ClientService) -> None:
    page = ClientsPage(client_service)

    assert page.begin_edit(uuid4()) is False
    page.cancel_edit()

    assert page.editing is None


def test_delete_requires_confirmation(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    owner_id = uuid4()
    client = client_repository.add(owner_id, "Maria")
    page = ClientsPage(client_service)
    page.load(owner_id)

    assert page.request_delete(client.id)
    assert page.delete(owner_id, client.id, confirmed=False) is False
    assert page.pending_delete is None
    assert client_repository.clients == [client]

    assert page.delete(owner_id, client.id, confirmed=True) is True
    assert page.clients == []
    assert client_repository.clients == []


def test_delete_failure_keeps_row(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    owner_id = uuid4()
    client = client_repository.add(owner_id, "Maria")
    page = ClientsPage(client_service)
    page.load(owner_id)
    client_repository.fail_on.add("delete_client")

    assert page.delete(owner_id, client.id, confirmed=True) is False
    assert page.clients == [client]
    assert page.banner is not None
    assert page.banner.message == "Erro ao excluir cliente. Tente novamente."
    assert page.banner.detail == "RuntimeError: delete_client failed"


def test_load_failure_sets_banner(
    client_service: ClientService, client_repository: InMemoryClientRepository
) -> None:
    client_repository.fail_on.add("list_clients")
    page = ClientsPage(client_service)

    page.load(uuid4())

    assert page.clients == []
    assert page.banner is not None
