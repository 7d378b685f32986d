"""Repository for Credential rows."""

from sqlmodel import select

from monteerly.models import Credential
from monteerly.repositories.base import BaseRepository


class CredentialRepository(BaseRepository[Credential]):
    """Data access for identity credentials."""

    model = Credential

    async def get_by_email(self, email: str) -> Credential | None:
        """Get credentials by email (stored lowercased)."""
        result = await self.session.execute(
            select(Credential).where(Credential.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_subject(self, subject_key: str) -> Credential | None:
        """Get the identity linked to a federated subject (`<provider>:<sub>`)."""
        result = await self.session.execute(
            select(Credential).where(Credential.provider_subject == subject_key)
        )
        return result.scalar_one_or_none()
