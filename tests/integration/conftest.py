"""Integration test fixtures for database and HTTP client operations.

Tests run against an in-memory SQLite database. The engine singleton holds
the only connection, so disposing it between tests gives every test an empty
database.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import SQLModel

from monteerly.core import db
from monteerly.core import redis as redis_core
from monteerly.core.health import reset_health_cache
from monteerly.main import create_app
from monteerly.models import Credential, Document  # noqa: F401 - registers tables
from monteerly.store import ChangeFeed, SqlDocumentStore
from tests.factories import CredentialsFactory


@pytest.fixture(autouse=True)
async def _reset_redis_between_tests() -> AsyncGenerator[None]:
    """Reset Redis state between tests.

    Redis clients hold references to their event loop, and pytest creates a
    new loop for each test.
    """
    redis_core.reset_redis_state()
    reset_health_cache()
    yield
    await redis_core.close_redis()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """The application's engine with a freshly created schema."""
    await db.dispose_engine()
    test_engine = db.get_engine()
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    await db.dispose_engine()


@pytest.fixture
async def store(engine: AsyncEngine) -> SqlDocumentStore:
    return SqlDocumentStore(engine, feed=ChangeFeed("test-changes"))


@pytest.fixture
async def client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient]:
    """HTTP client for a fresh app sharing the test database."""
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


SignUp = Callable[..., Awaitable[dict[str, Any]]]


@pytest.fixture
def sign_up(client: AsyncClient) -> SignUp:
    """Create an account through the API and return its session plus auth headers."""

    async def _sign_up(**overrides: Any) -> dict[str, Any]:
        credentials = CredentialsFactory.build(**overrides)
        response = await client.post("/api/v1/auth/signup", json=credentials.model_dump())
        assert response.status_code == 201, response.text
        session = response.json()
        session["email"] = credentials.email
        session["password"] = credentials.password
        session["headers"] = {"Authorization": f"Bearer {session['access_token']}"}
        return session

    return _sign_up


@pytest.fixture
async def auth_headers(sign_up: SignUp) -> dict[str, str]:
    session = await sign_up()
    return session["headers"]  # type: ignore[no-any-return]
