from typing import Annotated

from fastapi import APIRouter, Query, status

from monteerly.api.dependencies import BriefServiceDep, CurrentIdentity
from monteerly.models import BriefStatus
from monteerly.schemas.brief import BriefCreate, BriefRead
from monteerly.schemas.project import StatusChange

router = APIRouter(prefix="/briefs", tags=["briefs"])


@router.get("", response_model=list[BriefRead])
async def list_briefs(
    identity: CurrentIdentity,
    service: BriefServiceDep,
    status_filter: Annotated[BriefStatus | None, Query(alias="status")] = None,
) -> list[BriefRead]:
    briefs = await service.list_records(identity.uid, status_filter)
    return [BriefRead.from_record(b) for b in briefs]


@router.post(
    "",
    response_model=BriefRead,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"description": "Validation error"}},
)
async def create_brief(
    data: BriefCreate, identity: CurrentIdentity, service: BriefServiceDep
) -> BriefRead:
    brief_id = await service.create(identity.uid, data)
    return BriefRead.from_record(await service.get(identity.uid, brief_id))


@router.post(
    "/{brief_id}/status",
    response_model=BriefRead,
    responses={
        404: {"description": "Brief not found"},
        409: {"description": "Status change not allowed from the current status"},
    },
)
async def change_brief_status(
    brief_id: str,
    data: StatusChange,
    identity: CurrentIdentity,
    service: BriefServiceDep,
) -> BriefRead:
    """Accept, reject, start or complete a brief."""
    brief = await service.transition(identity.uid, brief_id, data.status)
    return BriefRead.from_record(brief)
