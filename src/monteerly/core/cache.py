"""Session token revocation list with Redis backend and graceful fallback.

Session tokens are stateless JWTs. Signing out records the token's jti here
until the token would have expired anyway. Without Redis, sign-out only
clears the client-side session.
"""

from monteerly.core.redis import get_redis

PREFIX_REVOKED_SESSION = "revoked_session"


async def revoke_session(jti: str, ttl: int) -> bool:
    """Add a session token id to the revocation list.

    Returns:
        True if stored in Redis, False if Redis unavailable or ttl already elapsed
    """
    if ttl <= 0:
        return False
    redis = await get_redis()
    if not redis:
        return False
    await redis.setex(f"{PREFIX_REVOKED_SESSION}:{jti}", ttl, "1")
    return True


async def is_session_revoked(jti: str) -> bool | None:
    """Check whether a session token id was revoked.

    Returns:
        True: revoked
        False: not revoked (Redis confirmed)
        None: Redis unavailable, revocation state unknown
    """
    redis = await get_redis()
    if not redis:
        return None
    result = await redis.get(f"{PREFIX_REVOKED_SESSION}:{jti}")
    return result is not None
