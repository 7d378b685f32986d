"""Project records: create, edit, delete and status changes."""

from collections.abc import Mapping
from typing import Any

from monteerly.core.logging import get_logger
from monteerly.models import EscrowStatus, Project, ProjectStatus
from monteerly.schemas.project import ProjectCreate, ProjectUpdate
from monteerly.services.record_service import RecordService, validate_fields
from monteerly.store import OWNER_FIELD
from monteerly.sync.materialize import PROJECTS

logger = get_logger(__name__)


class ProjectService(RecordService[Project]):
    """Owner-scoped project operations. Validation always runs before any write."""

    spec = PROJECTS

    async def create(self, owner_id: str, data: Mapping[str, Any] | ProjectCreate) -> str:
        """
        Create a draft project for `owner_id`.

        Returns:
            The new project's id.

        Raises:
            ValidationError: empty title, budget not above zero, or no deadline.
            StoreError: the store rejected the write.
        """
        payload = validate_fields(ProjectCreate, data)
        project_id = await self.store.create(
            self.collection,
            {
                **payload.to_fields(),
                OWNER_FIELD: owner_id,
                "status": ProjectStatus.DRAFT.value,
                "escrowStatus": EscrowStatus.UNFUNDED.value,
            },
        )
        logger.info("Project created", project_id=project_id, owner_id=owner_id)
        return project_id

    async def update(
        self, owner_id: str, project_id: str, data: Mapping[str, Any] | ProjectUpdate
    ) -> Project:
        """Replace the editable fields of a project. Status is left alone."""
        payload = validate_fields(ProjectUpdate, data)
        current = await self.get(owner_id, project_id)
        fields = payload.to_fields()
        await self.store.update(self.collection, project_id, fields)
        logger.info("Project updated", project_id=project_id)
        return current.model_copy(update=payload.model_dump())

    async def delete(self, owner_id: str, project_id: str) -> None:
        await self.get(owner_id, project_id)
        await self.store.delete(self.collection, project_id)
        logger.info("Project deleted", project_id=project_id)
