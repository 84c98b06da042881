"""Pytest configuration and fixtures."""

import os
from typing import AsyncGenerator

# Set test env vars before any app import
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("POSTGRES_USER", "test")
os.environ.setdefault("POSTGRES_PASSWORD", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vcnotebook.core.config import settings
from vcnotebook.core.database import get_db
from vcnotebook.main import app
from vcnotebook.models import Base
from vcnotebook.services.payment_service import get_payment_service

# In-memory SQLite shared by every connection of the test engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def override_payment_service():
    """Install a payment service for the checkout endpoint."""

    def _install(service):
        app.dependency_overrides[get_payment_service] = lambda: service
        return service

    yield _install
    app.dependency_overrides.pop(get_payment_service, None)


@pytest.fixture
def provider_settings(monkeypatch):
    """Configure identity, backend and analytics settings for a test."""
    values = {
        "FIREBASE_API_KEY": "AIzaTestKey1234567890",
        "FIREBASE_AUTH_DOMAIN": "vcnotebook-test.firebaseapp.com",
        "FIREBASE_PROJECT_ID": "vcnotebook-test",
        "FIREBASE_STORAGE_BUCKET": "vcnotebook-test.appspot.com",
        "FIREBASE_MESSAGING_SENDER_ID": "1234567890",
        "FIREBASE_APP_ID": "1:1234567890:web:abcdef",
        "SUPABASE_URL": "https://project.supabase.co",
        "SUPABASE_ANON_KEY": "anon-key",
        "SUPABASE_SERVICE_ROLE_KEY": "service-role-key",
        "GA_MEASUREMENT_ID": "G-TEST123",
    }
    for name, value in values.items():
        monkeypatch.setattr(settings, name, value)
    return values


@pytest.fixture
def db_engine():
    """The engine behind `db_session`, for code that connects directly."""
    return test_engine
