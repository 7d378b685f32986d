from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from monteerly.models import Brief, BriefStatus


class BriefCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(max_length=200)
    client_name: str = Field(max_length=200)
    description: str = Field(default="", max_length=5000)
    budget: float = Field(gt=0, allow_inf_nan=False)
    deadline: datetime

    @field_validator("title", "client_name")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: str | None) -> str:
        return (v or "").strip()

    def to_fields(self) -> dict[str, object]:
        return {
            "title": self.title,
            "clientName": self.client_name,
            "description": self.description,
            "budget": self.budget,
            "deadline": self.deadline,
        }


class BriefRead(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    owner_id: str
    title: str
    client_name: str
    description: str
    budget: float
    deadline: datetime | None
    status: BriefStatus
    created_at: datetime | None

    @classmethod
    def from_record(cls, brief: Brief) -> "BriefRead":
        return cls.model_validate(brief.model_dump())
