"""Project schemas for API request/response."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from monteerly.models import EscrowStatus, Project, ProjectStatus


class ProjectWrite(BaseModel):
    """Editable project fields. Used for both create and full edit."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(max_length=200)
    description: str = Field(default="", max_length=5000)
    budget: float = Field(gt=0, allow_inf_nan=False)
    deadline: datetime

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project title is required")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: str | None) -> str:
        return (v or "").strip()

    def to_fields(self) -> dict[str, object]:
        return {
            "title": self.title,
            "description": self.description,
            "budget": self.budget,
            "deadline": self.deadline,
        }


class ProjectCreate(ProjectWrite):
    """Schema for creating a project."""


class ProjectUpdate(ProjectWrite):
    """Schema for editing a project. Every editable field is replaced."""


class StatusChange(BaseModel):
    """Requested status for a project or brief."""

    status: str = Field(min_length=1)


class ProjectRead(BaseModel):
    """Schema for reading a project."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    owner_id: str
    title: str
    description: str
    budget: float
    deadline: datetime | None
    status: ProjectStatus
    escrow_status: EscrowStatus
    created_at: datetime | None

    @classmethod
    def from_record(cls, project: Project) -> "ProjectRead":
        return cls.model_validate(project.model_dump())
