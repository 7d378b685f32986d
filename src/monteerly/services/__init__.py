from monteerly.services.brief_service import BriefService
from monteerly.services.identity import (
    FederatedResult,
    Identity,
    IdentityBackend,
    SqlIdentityBackend,
)
from monteerly.services.profile_service import ProfileService
from monteerly.services.project_service import ProjectService
from monteerly.services.record_service import RecordService, validate_fields
from monteerly.services.session_provider import SessionProvider
from monteerly.services.transition_service import (
    BRIEF_TRANSITIONS,
    PROJECT_TRANSITIONS,
    StatusTransitionController,
)

__all__ = [
    "BRIEF_TRANSITIONS",
    "PROJECT_TRANSITIONS",
    "BriefService",
    "FederatedResult",
    "Identity",
    "IdentityBackend",
    "ProfileService",
    "ProjectService",
    "RecordService",
    "SessionProvider",
    "SqlIdentityBackend",
    "StatusTransitionController",
    "validate_fields",
]
