"""Pytest configuration and fixtures."""

import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles

# Add src and the project root to path
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT))

from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from tests.factories import RecordingEmailProvider


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


@pytest.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh SQLite database file per test.

    A file rather than :memory: so concurrent per-recipient sessions each
    get their own connection.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'notifications.db'}",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and inspecting rows directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """UoW factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def email_provider() -> RecordingEmailProvider:
    return RecordingEmailProvider()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client against the real app (no overrides)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def app_client(
    session_factory: async_sessionmaker[AsyncSession],
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    email_provider: RecordingEmailProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client wired to the in-memory database.

    This client:
    - Overrides the engine and emitter to use the SQLite UoW factory
    - Sends emails through the recording provider
    - Points the detailed health check at the test database
    """
    from api.v1.dependencies import (
        get_email_provider,
        get_event_emitter,
        get_notification_engine,
    )
    from domain.services.event_emitter import EventEmitter
    from domain.services.message_builder import MessageBuilder
    from domain.services.notification_engine import NotificationEngine
    from infrastructure.database.session import get_async_session
    from main import create_app

    app = create_app()

    engine = NotificationEngine(
        uow_factory,
        email_provider=email_provider,
        builder=MessageBuilder("https://app.test", "Groona"),
    )

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_notification_engine] = lambda: engine
    app.dependency_overrides[get_event_emitter] = lambda: EventEmitter(uow_factory, engine)
    app.dependency_overrides[get_email_provider] = lambda: email_provider
    app.dependency_overrides[get_async_session] = override_get_async_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
