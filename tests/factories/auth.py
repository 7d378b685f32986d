"""Authentication-related factories for test data generation."""

from datetime import timedelta
from typing import Any
from uuid import uuid4

from jose import jwt
from polyfactory import Use

from monteerly.schemas import CredentialsRequest
from tests.factories.base import BaseFactory, utc_now

DEFAULT_TEST_PASSWORD = "Studio-Test-Passw0rd!2024"

FEDERATED_ISSUER = "https://accounts.example.test"
FEDERATED_AUDIENCE = "monteerly-test"


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid4().hex[:8]}@example.com"


class CredentialsFactory(BaseFactory):
    """Factory for sign-up and sign-in bodies."""

    __model__ = CredentialsRequest

    email = Use(unique_email)
    password = DEFAULT_TEST_PASSWORD


def federated_id_token(key: str, **claims: Any) -> str:
    """An ID token as the federated provider would issue it, signed with HS256.

    Claims passed in replace the defaults; a claim set to None is still sent.
    """
    payload: dict[str, Any] = {
        "sub": "fed-subject-1",
        "email": "ada@example.com",
        "email_verified": True,
        "iss": FEDERATED_ISSUER,
        "aud": FEDERATED_AUDIENCE,
        "exp": utc_now() + timedelta(minutes=5),
    }
    payload.update(claims)
    return jwt.encode(payload, key, algorithm="HS256")  # type: ignore[no-any-return]
