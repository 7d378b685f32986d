"""Redis client with connection pooling and graceful fallback.

Redis is optional. It backs the session revocation list and relays document
change events between processes. Without it both features degrade to
single-process behavior: signed-out tokens stay valid until they expire, and
live queries only see writes made by their own process.
"""

from redis.asyncio import ConnectionPool, Redis

from monteerly.core.config import get_settings
from monteerly.core.logging import get_logger

logger = get_logger(__name__)

REDIS_FEATURES = ("session_revocation", "change_relay")

# The change relay keeps one pub/sub connection checked out for the process lifetime
RELAY_CONNECTIONS = 1

_pool: ConnectionPool | None = None
_redis: Redis | None = None
_connection_attempted: bool = False


def create_pool(url: str) -> ConnectionPool:
    """Connection pool sized for request traffic plus the change relay."""
    settings = get_settings()
    return ConnectionPool.from_url(
        url,
        max_connections=settings.redis_pool_size + RELAY_CONNECTIONS,
        health_check_interval=settings.redis_health_check_interval,
        socket_keepalive=True,
        decode_responses=True,
    )


async def get_redis() -> Redis | None:
    """Get Redis client. Returns None if unavailable (graceful degradation).

    The connection is lazily initialized on first call and reused thereafter.
    A failed attempt is not retried until close_redis() is called.
    """
    global _pool, _redis, _connection_attempted

    if _redis is not None:
        return _redis

    if _connection_attempted:
        return None

    _connection_attempted = True
    settings = get_settings()

    if not settings.redis_url:
        logger.info("Redis not configured (REDIS_URL not set)", degraded=REDIS_FEATURES)
        return None

    try:
        _pool = create_pool(settings.redis_url)
        _redis = Redis(connection_pool=_pool)
        await _redis.ping()  # type: ignore[misc]
        logger.info("Redis connected", features=REDIS_FEATURES)
        return _redis

    except Exception as e:
        logger.warning(
            "Redis connection failed, running single-process",
            error=str(e),
            degraded=REDIS_FEATURES,
        )
        if _redis:
            await _redis.aclose()
            _redis = None
        if _pool:
            await _pool.disconnect()
            _pool = None
        return None


async def close_redis() -> None:
    """Close Redis connection pool. Called during application shutdown."""
    global _pool, _redis, _connection_attempted

    if _redis:
        await _redis.aclose()
        logger.info("Redis connection closed")
    if _pool:
        await _pool.disconnect()

    _redis = None
    _pool = None
    _connection_attempted = False


def reset_redis_state() -> None:
    """Reset Redis state for testing purposes."""
    global _pool, _redis, _connection_attempted
    _redis = None
    _pool = None
    _connection_attempted = False
