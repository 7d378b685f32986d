"""Client briefs."""

from collections.abc import Mapping
from typing import Any

from monteerly.core.logging import get_logger
from monteerly.models import Brief, BriefStatus
from monteerly.schemas.brief import BriefCreate
from monteerly.services.record_service import RecordService, validate_fields
from monteerly.store import OWNER_FIELD
from monteerly.sync.materialize import BRIEFS

logger = get_logger(__name__)


class BriefService(RecordService[Brief]):
    spec = BRIEFS

    async def create(self, owner_id: str, data: Mapping[str, Any] | BriefCreate) -> str:
        """Record a pending brief. Raises ValidationError before any write."""
        payload = validate_fields(BriefCreate, data)
        brief_id = await self.store.create(
            self.collection,
            {
                **payload.to_fields(),
                OWNER_FIELD: owner_id,
                "status": BriefStatus.PENDING.value,
            },
        )
        logger.info("Brief created", brief_id=brief_id, owner_id=owner_id)
        return brief_id
