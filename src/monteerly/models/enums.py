"""Shared enums for models."""

from enum import Enum


class Collection(str, Enum):
    """Document collections used by the studio."""

    USERS = "users"
    PROJECTS = "projects"
    BRIEFS = "briefs"


class ProjectStatus(str, Enum):
    """Project workflow status, in lifecycle order."""

    DRAFT = "draft"
    HIRING = "hiring"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"


class BriefStatus(str, Enum):
    """Client brief workflow status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class EscrowStatus(str, Enum):
    """Project escrow state. Displayed only; no transition rules."""

    UNFUNDED = "unfunded"
    FUNDED = "funded"
    RELEASED = "released"
    DISPUTED = "disputed"


class IdentityProvider(str, Enum):
    """How an identity authenticates."""

    PASSWORD = "password"
    FEDERATED = "federated"
