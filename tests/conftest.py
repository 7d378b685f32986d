"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database and HTTP client fixtures are in tests/integration/conftest.py.
"""

import os

# Set the environment before any monteerly imports: settings, the rate limiter
# and the password hasher are all built at import time.
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-monteerly-tests-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_PARALLELISM", "1")
os.environ.pop("REDIS_URL", None)

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator, Generator

import pytest
from fakeredis import aioredis as fakeredis_aio
from redis.asyncio import Redis

from monteerly.core import redis as redis_core
from monteerly.core.config import get_settings

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()

# Every module that imported get_redis directly
_REDIS_CONSUMERS = (
    "monteerly.core.cache.get_redis",
    "monteerly.core.health.get_redis",
    "monteerly.store.changes.get_redis",
)


@pytest.fixture
async def fake_redis() -> AsyncGenerator[Redis]:
    """Provides a fakeredis client for testing.

    Returns an in-memory Redis implementation that behaves like
    a real Redis server but doesn't require external dependencies.
    """
    client = fakeredis_aio.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
async def mock_redis(fake_redis: Redis, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Redis]:
    """Patches get_redis() to return the fakeredis client everywhere."""
    redis_core.reset_redis_state()

    async def _get_fake_redis() -> Redis:
        return fake_redis

    monkeypatch.setattr("monteerly.core.redis.get_redis", _get_fake_redis)
    for target in _REDIS_CONSUMERS:
        monkeypatch.setattr(target, _get_fake_redis)
    yield fake_redis
    redis_core.reset_redis_state()


@pytest.fixture
async def mock_redis_unavailable(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[None]:
    """Patches get_redis() to return None (simulates Redis unavailable)."""
    redis_core.reset_redis_state()

    async def _get_none() -> None:
        return None

    monkeypatch.setattr("monteerly.core.redis.get_redis", _get_none)
    for target in _REDIS_CONSUMERS:
        monkeypatch.setattr(target, _get_none)
    yield
    redis_core.reset_redis_state()


@pytest.fixture
def federated_key(monkeypatch: pytest.MonkeyPatch) -> Generator[str]:
    """Configure federated sign-in with a shared HS256 key for the test."""
    key = "federated-test-signing-key-0123456789abcdef"
    monkeypatch.setenv("FEDERATED_SIGNING_KEY", key)
    monkeypatch.setenv("FEDERATED_ALGORITHMS", '["HS256"]')
    monkeypatch.setenv("FEDERATED_ISSUER", "https://accounts.example.test")
    monkeypatch.setenv("FEDERATED_AUDIENCE", "monteerly-test")
    get_settings.cache_clear()
    yield key
    get_settings.cache_clear()
