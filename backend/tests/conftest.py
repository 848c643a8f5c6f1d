"""Pytest fixtures for testing."""

import base64
import os
from datetime import UTC, datetime, timedelta
from collections.abc import AsyncGenerator, Callable
from unittest.mock import Mock

import httpx
import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TITLE_CARD_API_KEY", "")
os.environ.setdefault("SIDE_EFFECT_BACKOFF_SECONDS", "0")

from richhabits.api.deps import get_title_card_service
from richhabits.core.config import get_settings
from richhabits.core.database import get_db
from richhabits.core.schema_catalog import ColumnCatalog
from richhabits.main import app
from richhabits.models import Base
from richhabits.models.organization import Organization
from richhabits.models.user import Role, User
from richhabits.services.title_card_service import TitleCardService

# Postgres can be used by exporting TEST_DATABASE_URL; SQLite in memory otherwise
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-title-card"
STORAGE_BASE_URL = "http://storage.test/org-tiles"


def _install_sqlite_listeners(engine: AsyncEngine) -> None:
    """Enforce foreign keys and let SAVEPOINT work under pysqlite semantics."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


def make_engine(url: str = TEST_DATABASE_URL) -> AsyncEngine:
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=False, poolclass=StaticPool)
        _install_sqlite_listeners(engine)
        return engine
    return create_async_engine(url, echo=False, poolclass=NullPool)


@pytest_asyncio.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh schema per test, dropped afterwards."""
    test_engine = make_engine()
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest_asyncio.fixture(scope="function")
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database dependency override.

    Title card generation is unconfigured unless a test installs its own
    service through ``use_title_cards``.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.state.column_catalog = ColumnCatalog()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def image_api_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={"data": [{"b64_json": base64.b64encode(PNG_BYTES).decode()}]},
    )


def image_api_down(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, json={"error": {"message": "upstream unavailable"}})


@pytest.fixture()
def storage() -> Mock:
    """Storage double that records uploads and returns deterministic URLs."""
    mock = Mock()
    mock.put_bytes.side_effect = lambda key, data, content_type, overwrite=True: (
        f"{STORAGE_BASE_URL}/{key.removeprefix('org-tiles/')}"
    )
    return mock


@pytest.fixture()
def make_title_cards(storage: Mock) -> Callable[..., TitleCardService]:
    def _make(handler=image_api_ok, **overrides) -> TitleCardService:
        settings = get_settings().model_copy(
            update={"title_card_enabled": True, "title_card_api_key": "test-key", **overrides}
        )
        return TitleCardService(settings, storage=storage, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture()
def use_title_cards(make_title_cards) -> Callable[..., TitleCardService]:
    """Install a configured title card service on the app."""

    def _use(handler=image_api_ok, *, failing: bool = False, **overrides) -> TitleCardService:
        service = make_title_cards(image_api_down if failing else handler, **overrides)
        app.dependency_overrides[get_title_card_service] = lambda: service
        return service

    return _use


@pytest.fixture()
def issue_token() -> Callable[..., str]:
    """Sign tokens the way the external authentication service does."""

    def _issue(subject: str, expires_delta: timedelta | None = None) -> str:
        settings = get_settings()
        expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=30))
        return jwt.encode(
            {"sub": subject, "exp": expire}, settings.jwt_secret, algorithm=settings.jwt_algorithm
        )

    return _issue


@pytest_asyncio.fixture
async def owner_role(db: AsyncSession) -> Role:
    role = Role(name="Owner", slug="owner", description="Full control of an organization")
    db.add(role)
    await db.commit()
    return role


@pytest_asyncio.fixture
async def test_user(db: AsyncSession) -> User:
    user = User(email="coach@example.com", full_name="Pat Coach")
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def test_org(db: AsyncSession) -> Organization:
    org = Organization(name="Lincoln High School", state="NE", tags=["wrestling"])
    db.add(org)
    await db.commit()
    return org

