"""Domain records materialized from store documents.

Records are immutable views of a document at one snapshot. They are built by
monteerly.sync.materialize, which applies every default, so a Record always
satisfies its invariants regardless of what the raw document held.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from monteerly.models.enums import BriefStatus, Collection, EscrowStatus, ProjectStatus


class Record(BaseModel):
    """Fields shared by every persisted entity."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    collection: Collection
    id: str
    owner_id: str
    title: str = ""
    description: str = ""
    budget: float = 0
    deadline: datetime | None = None
    created_at: datetime | None = None


class Project(Record):
    collection: Collection = Collection.PROJECTS
    status: ProjectStatus = ProjectStatus.DRAFT
    escrow_status: EscrowStatus = EscrowStatus.UNFUNDED


class Brief(Record):
    collection: Collection = Collection.BRIEFS
    status: BriefStatus = BriefStatus.PENDING
    client_name: str = ""
