"""Dashboard and live-view payloads."""

from pydantic import BaseModel

from monteerly.schemas.project import ProjectRead
from monteerly.sync.aggregates import Aggregates


class AggregatesRead(BaseModel):
    total: int
    by_status: dict[str, int]
    total_budget: float

    @classmethod
    def from_aggregates(cls, aggregates: Aggregates) -> "AggregatesRead":
        return cls.model_validate(aggregates.to_dict())


class DashboardStats(BaseModel):
    """Figures shown on the dashboard cards."""

    total_projects: int
    active_projects: int
    completed_projects: int
    hiring_projects: int
    total_budget: float


class DashboardRead(BaseModel):
    stats: DashboardStats
    aggregates: AggregatesRead
    recent_projects: list[ProjectRead]
    active_projects: list[ProjectRead]
