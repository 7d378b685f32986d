"""Project endpoints, scoped to the signed-in owner."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from monteerly.api.dependencies import CurrentIdentity, ProjectServiceDep
from monteerly.models import ProjectStatus
from monteerly.schemas.project import ProjectCreate, ProjectRead, ProjectUpdate, StatusChange

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get(
    "",
    response_model=list[ProjectRead],
    summary="List projects",
    description="Newest first. Optionally filtered to one status.",
)
async def list_projects(
    identity: CurrentIdentity,
    service: ProjectServiceDep,
    status_filter: Annotated[
        ProjectStatus | None, Query(alias="status", description="Only this status")
    ] = None,
) -> list[ProjectRead]:
    projects = await service.list_records(identity.uid, status_filter)
    return [ProjectRead.from_record(p) for p in projects]


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
    responses={
        201: {"description": "Project created as a draft"},
        422: {"description": "Missing title, deadline, or a budget not above zero"},
    },
)
async def create_project(
    data: ProjectCreate, identity: CurrentIdentity, service: ProjectServiceDep
) -> ProjectRead:
    project_id = await service.create(identity.uid, data)
    return ProjectRead.from_record(await service.get(identity.uid, project_id))


@router.get(
    "/{project_id}",
    response_model=ProjectRead,
    responses={404: {"description": "Project not found"}},
)
async def get_project(
    project_id: str, identity: CurrentIdentity, service: ProjectServiceDep
) -> ProjectRead:
    return ProjectRead.from_record(await service.get(identity.uid, project_id))


@router.put(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Edit project",
    responses={
        404: {"description": "Project not found"},
        422: {"description": "Validation error"},
    },
)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    identity: CurrentIdentity,
    service: ProjectServiceDep,
) -> ProjectRead:
    """Replace title, description, budget and deadline."""
    return ProjectRead.from_record(await service.update(identity.uid, project_id, data))


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Project not found"}},
)
async def delete_project(
    project_id: str, identity: CurrentIdentity, service: ProjectServiceDep
) -> None:
    await service.delete(identity.uid, project_id)


@router.post(
    "/{project_id}/status",
    response_model=ProjectRead,
    summary="Change project status",
    responses={
        404: {"description": "Project not found"},
        409: {"description": "Status change not allowed from the current status"},
    },
)
async def change_project_status(
    project_id: str,
    data: StatusChange,
    identity: CurrentIdentity,
    service: ProjectServiceDep,
) -> ProjectRead:
    project = await service.transition(identity.uid, project_id, data.status)
    return ProjectRead.from_record(project)
