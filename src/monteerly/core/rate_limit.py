"""Rate limiting for the sign-in endpoints.

Uses Redis for shared counters when REDIS_URL is configured, otherwise
in-memory storage (per-process). Disabled in the testing environment.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from monteerly.core.config import get_settings
from monteerly.core.logging import get_logger

logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """Rate limit key from the client IP only.

    Never include request headers or body fields: a caller could rotate them
    to get a fresh bucket on every request.
    """
    return get_remote_address(request) or "unknown"


def signin_limit() -> str:
    return get_settings().signin_rate_limit


def create_limiter() -> Limiter:
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    if settings.redis_url:
        logger.info("Rate limiter using Redis backend")
        return Limiter(key_func=get_rate_limit_key, storage_uri=settings.redis_url)

    logger.info("Rate limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key)


# Reads settings at import time; changing them needs a restart.
limiter = create_limiter()
