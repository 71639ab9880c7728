"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from sales_tracker.config import Settings
from sales_tracker.containers import AppContainer, assemble_container
from sales_tracker.domain.clients import ClientChoice, ClientRecord
from sales_tracker.domain.models import SessionUser
from sales_tracker.domain.sales import (
    SaleDetail,
    SalePhotoRecord,
    SaleRecord,
    SaleSummary,
)
from sales_tracker.services.clients import ClientRepository, ClientService
from sales_tracker.services.dashboard import DashboardRepository, DashboardService
from sales_tracker.services.sales import (
    PhotoStorage,
    SalePhotoRepository,
    SaleRepository,
    SaleService,
)
from sales_tracker.services.session_store import (
    INVALID_CREDENTIALS_ERROR,
    AuthListener,
    AuthProvider,
    AuthProviderError,
    SessionStore,
)

PASSWORD = "secret123"


def _clock(offset: int) -> datetime:
    return datetime(2024, 1, 1, tzinfo=UTC) + timedelta(seconds=offset)


@dataclass
class FakeAuthProvider(AuthProvider):
    """Identity provider keeping accounts in memory and emitting events."""

    accounts: dict[str, tuple[str, SessionUser]] = field(default_factory=dict)
    current: SessionUser | None = None
    listeners: list[AuthListener] = field(default_factory=list)
    auto_confirm: bool = False
    fail_session_fetch: bool = False
    reset_requests: list[tuple[str, str | None]] = field(default_factory=list)
    sign_in_error: str | None = None
    unreachable: bool = False

    def register(self, email: str, password: str, name: str | None = None) -> SessionUser:
        user = SessionUser(id=uuid4(), email=email, display_name=name)
        self.accounts[email] = (password, user)
        return user

    def get_current_user(self) -> SessionUser | None:
        if self.fail_session_fetch:
            raise RuntimeError("session storage unavailable")
        return self.current

    def sign_in(self, email: str, password: str) -> None:
        self._check_reachable()
        if self.sign_in_error:
            raise AuthProviderError(self.sign_in_error)
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthProviderError(INVALID_CREDENTIALS_ERROR)
        self.current = account[1]
        self.emit("SIGNED_IN", self.current)

    def sign_up(self, email: str, password: str, display_name: str) -> bool:
        self._check_reachable()
        if email in self.accounts:
            raise AuthProviderError("User already registered")
        user = self.register(email, password, display_name)
        if not self.auto_confirm:
            return False
        self.current = user
        self.emit("SIGNED_IN", user)
        return True

    def sign_out(self) -> None:
        self._check_reachable()
        self.current = None
        self.emit("SIGNED_OUT", None)

    def reset_password(self, email: str, redirect_to: str | None) -> None:
        self._check_reachable()
        self.reset_requests.append((email, redirect_to))

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def emit(self, event: str, user: SessionUser | None) -> None:
        for listener in list(self.listeners):
            listener(event, user)

    def _check_reachable(self) -> None:
        if self.unreachable:
            raise RuntimeError("connection refused")


@dataclass
class InMemoryClientRepository(ClientRepository):
    """In-memory client repository for tests."""

    clients: list[ClientRecord] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)

    def add(self, owner_id: UUID, name: str, email: str | None = None) -> ClientRecord:
        return self.create_client(owner_id, name, email, None)

    def list_clients(self, owner_id: UUID, search: str | None) -> list[ClientRecord]:
        self._record("list_clients")
        rows = [c for c in self.clients if c.user_id == owner_id]
        if search:
            rows = [c for c in rows if search.lower() in c.name.lower()]
        return sorted(rows, key=lambda c: c.created_at, reverse=True)

    def list_recent_choices(self, owner_id: UUID, limit: int) -> list[ClientChoice]:
        rows = self.list_clients(owner_id, None)[:limit]
        return [ClientChoice(id=c.id, name=c.name) for c in rows]

    def search_choices(
        self, owner_id: UUID, search: str, limit: int
    ) -> list[ClientChoice]:
        rows = sorted(self.list_clients(owner_id, search), key=lambda c: c.name)
        return [ClientChoice(id=c.id, name=c.name) for c in rows[:limit]]

    def create_client(
        self, owner_id: UUID, name: str, email: str | None, phone: str | None
    ) -> ClientRecord:
        self._record("create_client")
        record = ClientRecord(
            id=uuid4(),
            user_id=owner_id,
            name=name,
            email=email,
            phone=phone,
            created_at=_clock(len(self.clients)),
        )
        self.clients.append(record)
        return record

    def update_client(  # noqa: PLR0913
        self,
        owner_id: UUID,
        client_id: UUID,
        name: str,
        email: str | None,
        phone: str | None,
    ) -> None:
        self._record("update_client")
        self.clients = [
            replace(c, name=name, email=email, phone=phone)
            if c.id == client_id and c.user_id == owner_id
            else c
            for c in self.clients
        ]

    def delete_client(self, owner_id: UUID, client_id: UUID) -> None:
        self._record("delete_client")
        self.clients = [
            c for c in self.clients if not (c.id == client_id and c.user_id == owner_id)
        ]

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")


@dataclass
class InMemorySalePhotoRepository(SalePhotoRepository):
    """In-memory photo records for tests."""

    photos: list[SalePhotoRecord] = field(default_factory=list)
    fail_create_at: int | None = None

    def create_photo(
        self, owner_id: UUID, sale_id: UUID, storage_path: str
    ) -> SalePhotoRecord:
        if self.fail_create_at == len(self.photos) + 1:
            raise RuntimeError("Failed to create sale photo")
        record = SalePhotoRecord(
            id=uuid4(),
            user_id=owner_id,
            sale_id=sale_id,
            storage_path=storage_path,
            created_at=_clock(len(self.photos)),
        )
        self.photos.append(record)
        return record

    def list_photos(self, owner_id: UUID, sale_id: UUID) -> list[SalePhotoRecord]:
        return [p for p in self.photos if p.sale_id == sale_id and p.user_id == owner_id]

    def delete_photo(self, owner_id: UUID, photo_id: UUID) -> None:
        self.photos = [
            p for p in self.photos if not (p.id == photo_id and p.user_id == owner_id)
        ]


@dataclass
class InMemorySaleRepository(SaleRepository):
    """In-memory sales; deleting a sale cascades to its photo records."""

    clients: InMemoryClientRepository
    photos: InMemorySalePhotoRepository
    sales: list[SaleRecord] = field(default_factory=list)
    queries: list[dict[str, object]] = field(default_factory=list)
    fail_create: bool = False

    def add(  # noqa: PLR0913
        self,
        owner_id: UUID,
        client_id: UUID,
        sale_date: date,
        instagram: str | None = None,
        is_completed: bool = False,
    ) -> SaleRecord:
        record = self.create_sale(owner_id, client_id, sale_date, instagram, None)
        if is_completed:
            record = replace(record, is_completed=True)
            self.sales[-1] = record
        return record

    def list_sales(
        self,
        owner_id: UUID,
        completed: bool | None,
        start_date: date | None,
        end_date: date | None,
    ) -> list[SaleSummary]:
        self.queries.append(
            {"completed": completed, "start_date": start_date, "end_date": end_date}
        )
        rows = [s for s in self.sales if s.user_id == owner_id]
        if completed is not None:
            rows = [s for s in rows if s.is_completed == completed]
        if start_date is not None and end_date is not None:
            rows = [s for s in rows if start_date <= s.sale_date <= end_date]
        rows.sort(key=lambda s: s.sale_date, reverse=True)
        return [
            SaleSummary(
                id=s.id,
                sale_date=s.sale_date,
                is_completed=s.is_completed,
                created_at=s.created_at,
                notes=s.notes,
                instagram=s.instagram,
                client_name=self._client_name(s.client_id),
            )
            for s in rows
        ]

    def create_sale(  # noqa: PLR0913
        self,
        owner_id: UUID,
        client_id: UUID,
        sale_date: date,
        instagram: str | None,
        notes: str | None,
    ) -> SaleRecord:
        if self.fail_create:
            raise RuntimeError("Failed to create sale")
        record = SaleRecord(
            id=uuid4(),
            user_id=owner_id,
            client_id=client_id,
            sale_date=sale_date,
            instagram=instagram,
            notes=notes,
            is_completed=False,
            created_at=_clock(len(self.sales)),
        )
        self.sales.append(record)
        return record

    def get_sale(self, owner_id: UUID, sale_id: UUID) -> SaleDetail | None:
        sale = self._find(owner_id, sale_id)
        if sale is None:
            return None
        name = self._client_name(sale.client_id)
        return SaleDetail(
            id=sale.id,
            sale_date=sale.sale_date,
            instagram=sale.instagram,
            notes=sale.notes,
            is_completed=sale.is_completed,
            client=ClientChoice(id=sale.client_id, name=name) if name else None,
        )

    def update_sale(  # noqa: PLR0913
        self,
        owner_id: UUID,
        sale_id: UUID,
        sale_date: date,
        instagram: str | None,
        notes: str | None,
        is_completed: bool,
    ) -> None:
        self.sales = [
            replace(
                s,
                sale_date=sale_date,
                instagram=instagram,
                notes=notes,
                is_completed=is_completed,
            )
            if s.id == sale_id and s.user_id == owner_id
            else s
            for s in self.sales
        ]

    def delete_sale(self, owner_id: UUID, sale_id: UUID) -> None:
        if self._find(owner_id, sale_id) is None:
            return
        self.sales = [s for s in self.sales if s.id != sale_id]
        self.photos.photos = [p for p in self.photos.photos if p.sale_id != sale_id]

    def _find(self, owner_id: UUID, sale_id: UUID) -> SaleRecord | None:
        for sale in self.sales:
            if sale.id == sale_id and sale.user_id == owner_id:
                return sale
        return None

    def _client_name(self, client_id: UUID) -> str | None:
        for client in self.clients.clients:
            if client.id == client_id:
                return client.name
        return None


@dataclass
class FakePhotoStorage(PhotoStorage):
    """Object storage stand-in with failure injection."""

    objects: dict[str, bytes] = field(default_factory=dict)
    upload_calls: int = 0
    fail_upload_at: int | None = None
    fail_remove: bool = False
    fail_sign: bool = False

    def upload(self, path: str, content: bytes, content_type: str | None) -> None:
        self.upload_calls += 1
        if self.fail_upload_at == self.upload_calls:
            raise RuntimeError("upload failed")
        self.objects[path] = content

    def remove(self, paths: list[str]) -> None:
        if self.fail_remove:
            raise RuntimeError("remove failed")
        for path in paths:
            self.objects.pop(path, None)

    def create_signed_url(self, path: str, expires_in: int) -> str | None:
        if self.fail_sign:
            raise RuntimeError("sign failed")
        return f"https://storage.test/{path}?expires_in={expires_in}"


@dataclass
class InMemoryDashboardRepository(DashboardRepository):
    """Counts derived from the in-memory client and sale repositories."""

    clients: InMemoryClientRepository
    sales: InMemorySaleRepository

    def count_clients(self, owner_id: UUID) -> int:
        return len([c for c in self.clients.clients if c.user_id == owner_id])

    def count_sales(self, owner_id: UUID, completed: bool | None = None) -> int:
        return len(
            [
                s
                for s in self.sales.sales
                if s.user_id == owner_id
                and (completed is None or s.is_completed == completed)
            ]
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key",
        password_reset_redirect_url="https://app.example.com/reset",
        environment="test",
    )


@pytest.fixture
def auth_provider() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def client_repository() -> InMemoryClientRepository:
    return InMemoryClientRepository()


@pytest.fixture
def photo_repository() -> InMemorySalePhotoRepository:
    return InMemorySalePhotoRepository()


@pytest.fixture
def sale_repository(
    client_repository: InMemoryClientRepository,
    photo_repository: InMemorySalePhotoRepository,
) -> InMemorySaleRepository:
    return InMemorySaleRepository(client_repository, photo_repository)


@pytest.fixture
def photo_storage() -> FakePhotoStorage:
    return FakePhotoStorage()


@pytest.fixture
def client_service(client_repository: InMemoryClientRepository) -> ClientService:
    return ClientService(client_repository)


@pytest.fixture
def sale_service(
    sale_repository: InMemorySaleRepository,
    photo_repository: InMemorySalePhotoRepository,
    photo_storage: FakePhotoStorage,
) -> SaleService:
    return SaleService(sale_repository, photo_repository, photo_storage)


@pytest.fixture
def owner(auth_provider: FakeAuthProvider) -> SessionUser:
    return auth_provider.register("ana@example.com", PASSWORD, "Ana Souza")


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    auth_provider: FakeAuthProvider,
    client_service: ClientService,
    sale_service: SaleService,
    client_repository: InMemoryClientRepository,
    sale_repository: InMemorySaleRepository,
) -> AppContainer:
    session_store = SessionStore(
        auth_provider,
        password_reset_redirect_url=settings.password_reset_redirect_url,
    )

    async def close_resources() -> None:
        session_store.close()

    app_container = assemble_container(
        settings=settings,
        session_store=session_store,
        client_service=client_service,
        sale_service=sale_service,
        dashboard_service=DashboardService(
            InMemoryDashboardRepository(client_repository, sale_repository)
        ),
        close_resources=close_resources,
    )
    session_store.start()
    return app_container


@pytest.fixture
def signed_in(container: AppContainer, owner: SessionUser) -> AppContainer:
    result = container.session_store.sign_in(owner.email or "", PASSWORD)
    assert result.ok
    return container
