"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Environment is set before userauth is imported, so the settings
   singleton sees a test signing secret and the cheapest bcrypt cost.
2. Each test gets its own SQLite in-memory engine (StaticPool keeps the
   single connection alive, so every session sees the same database).
3. The app's get_db is overridden to hand out sessions on that engine.
"""

import os

os.environ.setdefault("USERAUTH_JWT_SECRET", "test-signing-secret-0123456789abcdef")
os.environ.setdefault("USERAUTH_HASH_COST_FACTOR", "4")
os.environ.setdefault("USERAUTH_ENVIRONMENT", "development")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from userauth.auth.dependencies import get_token_issuer  # noqa: E402
from userauth.auth.jwt import TokenIssuer, TokenValidator  # noqa: E402
from userauth.auth.password import PasswordHasher  # noqa: E402
from userauth.config import settings  # noqa: E402
from userauth.db.engine import get_db  # noqa: E402
from userauth.db.models import Base  # noqa: E402
from userauth.main import app  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite://"
TEST_SECRET = os.environ["USERAUTH_JWT_SECRET"]


@pytest_asyncio.fixture()
async def db_engine():
    """In-memory database with the schema created."""
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(db_engine):
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture()
async def client(db_engine):
    """HTTP client with the app's get_db pointed at the test database."""
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def hasher():
    return PasswordHasher(cost_factor=4)


@pytest.fixture()
def issuer():
    return TokenIssuer(secret=TEST_SECRET, issuer=settings.token_issuer)


@pytest.fixture()
def validator():
    return TokenValidator(secret=TEST_SECRET, issuer=settings.token_issuer)


@pytest.fixture()
def admin_headers():
    """Authorization header for the configured admin identity."""
    token = get_token_issuer().issue(settings.admin_name)
    return {"Authorization": f"Bearer {token}"}
