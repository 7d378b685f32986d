"""Credential model - identities known to the identity backend."""

from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from monteerly.models.base import utc_now
from monteerly.models.enums import IdentityProvider


class Credential(SQLModel, table=True):
    """Sign-in credentials for one identity.

    Password identities carry an Argon2 hash. Federated identities carry the
    provider's subject claim instead and have no password.
    """

    __tablename__ = "credentials"

    uid: str = Field(primary_key=True, max_length=64)
    email: str = Field(max_length=320, unique=True, index=True)
    hashed_password: str | None = Field(default=None, max_length=255)
    provider: str = Field(default=IdentityProvider.PASSWORD.value, max_length=32)
    provider_subject: str | None = Field(default=None, max_length=255, index=True)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    @property
    def provider_enum(self) -> IdentityProvider:
        return IdentityProvider(self.provider)
