from fastapi import APIRouter

from monteerly.api.dependencies import CurrentIdentity, ProjectServiceDep
from monteerly.models import ProjectStatus
from monteerly.schemas.dashboard import AggregatesRead, DashboardRead, DashboardStats
from monteerly.schemas.project import ProjectRead

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RECENT_PROJECTS = 5
ACTIVE_PROJECTS = 3
ACTIVE_STATUSES = (ProjectStatus.IN_PROGRESS, ProjectStatus.REVIEW)


@router.get("", response_model=DashboardRead)
async def dashboard(identity: CurrentIdentity, service: ProjectServiceDep) -> DashboardRead:
    """Project counts, total budget, the most recent and the active projects."""
    view = await service.view(identity.uid)
    aggregates = view.aggregates
    return DashboardRead(
        stats=DashboardStats(
            total_projects=aggregates.total,
            active_projects=aggregates.count(*ACTIVE_STATUSES),
            completed_projects=aggregates.count(ProjectStatus.COMPLETED),
            hiring_projects=aggregates.count(ProjectStatus.HIRING),
            total_budget=aggregates.total_budget,
        ),
        aggregates=AggregatesRead.from_aggregates(aggregates),
        recent_projects=[
            ProjectRead.from_record(p)  # type: ignore[arg-type]
            for p in view.records[:RECENT_PROJECTS]
        ],
        active_projects=[
            ProjectRead.from_record(p)  # type: ignore[arg-type]
            for p in view.in_status(*ACTIVE_STATUSES)[:ACTIVE_PROJECTS]
        ],
    )
