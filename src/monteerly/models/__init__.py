"""Database models and domain records.

Table models are imported here so SQLModel.metadata sees them.
"""

from monteerly.models.credential import Credential
from monteerly.models.document import Document
from monteerly.models.enums import (
    BriefStatus,
    Collection,
    EscrowStatus,
    IdentityProvider,
    ProjectStatus,
)
from monteerly.models.records import Brief, Project, Record

__all__ = [
    # Tables
    "Credential",
    "Document",
    # Enums
    "BriefStatus",
    "Collection",
    "EscrowStatus",
    "IdentityProvider",
    "ProjectStatus",
    # Records
    "Brief",
    "Project",
    "Record",
]
