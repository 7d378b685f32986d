"""Cryptographic utilities - password hashing and session tokens."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import argon2
from jose import JWTError, jwt

from monteerly.core.config import get_settings

SESSION_TOKEN_TYPE = "session"


def _create_password_hasher() -> argon2.PasswordHasher:
    """Create password hasher with settings from config."""
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


_password_hasher = _create_password_hasher()


def hash_password(password: str) -> str:
    """Hash password using Argon2id."""
    return _password_hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash. Returns False on any error."""
    try:
        _password_hasher.verify(hashed, password)
        return True
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


# Verified against when the email is unknown so both paths cost the same.
DUMMY_PASSWORD_HASH = hash_password("monteerly-dummy-password")


def create_session_token(
    uid: str,
    email: str | None,
    provider: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed session token for an identity."""
    settings = get_settings()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.session_token_expire_minutes)

    to_encode = {
        "sub": uid,
        "email": email,
        "provider": provider,
        "exp": expire,
        "type": SESSION_TOKEN_TYPE,
        "jti": uuid4().hex,
    }
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_session_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a session token. Returns None on any error."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    if payload.get("type") != SESSION_TOKEN_TYPE or not payload.get("sub"):
        return None
    return payload  # type: ignore[no-any-return]


def decode_federated_token(id_token: str) -> dict[str, Any] | None:
    """Verify an ID token issued by the federated provider.

    Returns the claims, or None when the token is invalid, expired, issued by
    another issuer or meant for another audience.
    """
    settings = get_settings()
    if not settings.federated_signing_key:
        return None
    try:
        return jwt.decode(  # type: ignore[no-any-return]
            id_token,
            settings.federated_signing_key,
            algorithms=settings.federated_algorithms,
            audience=settings.federated_audience,
            issuer=settings.federated_issuer,
            options={"verify_aud": settings.federated_audience is not None},
        )
    except JWTError:
        return None
