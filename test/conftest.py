"""
Pytest configuration and fixtures for the two-factor service tests
"""

import os
import sys
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

# Settings are read at import time; point them at a throwaway database first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("ENVIRONMENT", "test")

from twofa.database import Base  # noqa: E402
from twofa.models import RecoveryCode, TwoFactorAuth  # noqa: E402, F401
from twofa.services.two_factor_service import TwoFactorService, get_two_factor_service  # noqa: E402
from twofa.stores.memory import InMemoryTwoFactorStore  # noqa: E402
from twofa.stores.sql import SQLAlchemyTwoFactorStore  # noqa: E402
from twofa.utils.clock import FixedClock  # noqa: E402

# Start of a 30-second window: 1_700_000_010 / 30 == 56_666_667
T0 = 1_700_000_010

# RFC 4226 / RFC 6238 test secret ("12345678901234567890")
RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"

# Secret used in authenticator documentation
DEMO_SECRET = "JBSWY3DPEHPK3PXP"

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def clock() -> FixedClock:
    """A clock pinned to the start of a TOTP window."""
    return FixedClock(T0)


@pytest.fixture
def memory_store() -> InMemoryTwoFactorStore:
    return InMemoryTwoFactorStore()


@pytest.fixture
def service(memory_store, clock) -> TwoFactorService:
    """Service backed by the in-memory store."""
    return TwoFactorService(memory_store, clock=clock, issuer="FilHub")


@pytest.fixture(scope="function")
async def setup_test_database():
    """Create a fresh schema for each test function that needs it."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(scope="function")
async def test_db(setup_test_database) -> AsyncGenerator[AsyncSession, None]:
    """Database session on the test engine."""
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
def sql_store(test_db) -> SQLAlchemyTwoFactorStore:
    return SQLAlchemyTwoFactorStore(test_db)


@pytest.fixture
async def client(setup_test_database, clock) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app, with a SQL-backed service on the test engine."""
    from main import app

    async def override_service():
        async with TestSessionLocal() as session:
            yield TwoFactorService(SQLAlchemyTwoFactorStore(session), clock=clock, issuer="FilHub")

    app.dependency_overrides[get_two_factor_service] = override_service
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_two_factor_service, None)
