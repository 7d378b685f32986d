"""Profile documents in the `users` collection."""

from typing import Any

from monteerly.core.exceptions import NotFound
from monteerly.core.logging import get_logger
from monteerly.models import Collection
from monteerly.models.base import utc_now
from monteerly.services.identity import Identity
from monteerly.store import CREATED_AT_FIELD, DocumentStore

logger = get_logger(__name__)


class ProfileService:
    """Keeps one profile document per identity, keyed by uid."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get(self, uid: str) -> dict[str, Any] | None:
        try:
            return await self.store.get(Collection.USERS.value, uid)
        except NotFound:
            return None

    async def ensure_profile(self, identity: Identity) -> dict[str, Any]:
        """Upsert the identity's profile without overwriting existing fields.

        `email` and `createdAt` are written only when the profile lacks them.
        Returns the fields that were written (empty when nothing was missing).
        """
        existing = await self.get(identity.uid) or {}
        missing: dict[str, Any] = {}
        if not existing.get("email") and identity.email:
            missing["email"] = identity.email
        if not existing.get(CREATED_AT_FIELD):
            missing[CREATED_AT_FIELD] = utc_now()

        if missing:
            await self.store.set(Collection.USERS.value, identity.uid, missing, merge=True)
            logger.info("Profile upserted", uid=identity.uid, fields=sorted(missing))
        return missing
