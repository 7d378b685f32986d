"""Identity backend: who may sign in, and how.

Password identities are stored with an Argon2 hash. Federated identities are
proven by an ID token from the configured OIDC provider; the first sign-in
creates the identity, later ones find it by the provider's subject claim.
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from monteerly.core.config import get_settings
from monteerly.core.db import get_session
from monteerly.core.exceptions import AuthError, StoreError
from monteerly.core.logging import get_logger
from monteerly.core.security import (
    DUMMY_PASSWORD_HASH,
    decode_federated_token,
    hash_password,
    verify_password,
)
from monteerly.models import Credential, IdentityProvider
from monteerly.repositories import CredentialRepository

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
EMAIL_IN_USE = "An account with this email already exists"


@dataclass(frozen=True)
class Identity:
    """An authenticated user as seen by the rest of the studio."""

    uid: str
    email: str | None
    provider: IdentityProvider

    @classmethod
    def from_credential(cls, credential: Credential) -> "Identity":
        return cls(
            uid=credential.uid,
            email=credential.email,
            provider=credential.provider_enum,
        )


@dataclass(frozen=True)
class FederatedResult:
    identity: Identity
    is_new: bool


class IdentityBackend(Protocol):
    async def create_user(self, email: str, password: str) -> Identity: ...

    async def verify_password(self, email: str, password: str) -> Identity: ...

    async def verify_federated(self, id_token: str) -> FederatedResult: ...

    async def get_identity(self, uid: str) -> Identity | None: ...


def new_uid() -> str:
    return uuid4().hex


class SqlIdentityBackend:
    """IdentityBackend over the `credentials` table."""

    def __init__(self, engine: AsyncEngine | None = None) -> None:
        self._engine = engine

    async def create_user(self, email: str, password: str) -> Identity:
        email = email.strip().lower()
        credential = Credential(
            uid=new_uid(),
            email=email,
            hashed_password=hash_password(password),
            provider=IdentityProvider.PASSWORD.value,
        )
        try:
            async with get_session(self._engine) as session:
                repo = CredentialRepository(session)
                if await repo.get_by_email(email) is not None:
                    raise AuthError(EMAIL_IN_USE)
                repo.add(credential)
                await session.commit()
        except IntegrityError as e:
            raise AuthError(EMAIL_IN_USE) from e
        except SQLAlchemyError as e:
            raise StoreError("Could not create account") from e

        logger.info("Identity created", uid=credential.uid, provider=credential.provider)
        return Identity.from_credential(credential)

    async def verify_password(self, email: str, password: str) -> Identity:
        try:
            async with get_session(self._engine) as session:
                credential = await CredentialRepository(session).get_by_email(email)
        except SQLAlchemyError as e:
            raise StoreError("Could not check credentials") from e

        # Always run the hash check so unknown emails cost the same as wrong passwords
        password_hash = (
            credential.hashed_password
            if credential is not None and credential.hashed_password
            else DUMMY_PASSWORD_HASH
        )
        password_valid = verify_password(password, password_hash)

        if credential is None or not credential.hashed_password or not password_valid:
            raise AuthError(INVALID_CREDENTIALS)
        return Identity.from_credential(credential)

    async def verify_federated(self, id_token: str) -> FederatedResult:
        settings = get_settings()
        if not settings.federated_signing_key:
            raise AuthError("Federated sign-in is not configured")

        claims = decode_federated_token(id_token)
        if claims is None:
            raise AuthError("Invalid or expired federated sign-in token")

        subject = claims.get("sub")
        email = (claims.get("email") or "").strip().lower()
        if not subject or not email:
            raise AuthError("Federated sign-in token is missing the account email")

        subject_key = f"{settings.federated_provider}:{subject}"
        try:
            async with get_session(self._engine) as session:
                repo = CredentialRepository(session)
                credential = await repo.get_by_subject(subject_key)
                if credential is not None:
                    return FederatedResult(Identity.from_credential(credential), is_new=False)

                existing = await repo.get_by_email(email)
                if existing is not None:
                    if not claims.get("email_verified", False):
                        raise AuthError(EMAIL_IN_USE)
                    # Same verified email: attach the provider to the existing identity
                    existing.provider_subject = subject_key
                    repo.add(existing)
                    await session.commit()
                    return FederatedResult(Identity.from_credential(existing), is_new=False)

                credential = Credential(
                    uid=new_uid(),
                    email=email,
                    provider=IdentityProvider.FEDERATED.value,
                    provider_subject=subject_key,
                )
                repo.add(credential)
                await session.commit()
        except IntegrityError as e:
            raise AuthError(EMAIL_IN_USE) from e
        except SQLAlchemyError as e:
            raise StoreError("Could not complete federated sign-in") from e

        logger.info("Identity created", uid=credential.uid, provider=credential.provider)
        return FederatedResult(Identity.from_credential(credential), is_new=True)

    async def get_identity(self, uid: str) -> Identity | None:
        try:
            async with get_session(self._engine) as session:
                credential = await CredentialRepository(session).get(uid)
        except SQLAlchemyError as e:
            raise StoreError("Could not load identity") from e
        return Identity.from_credential(credential) if credential else None
