from monteerly.schemas.auth import (
    CredentialsRequest,
    FederatedSignInRequest,
    IdentityRead,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
)
from monteerly.schemas.brief import BriefCreate, BriefRead
from monteerly.schemas.dashboard import AggregatesRead, DashboardRead, DashboardStats
from monteerly.schemas.project import (
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
    ProjectWrite,
    StatusChange,
)

__all__ = [
    # Auth
    "CredentialsRequest",
    "FederatedSignInRequest",
    "IdentityRead",
    "SessionResponse",
    "SignInRequest",
    "SignUpRequest",
    # Records
    "BriefCreate",
    "BriefRead",
    "ProjectCreate",
    "ProjectRead",
    "ProjectUpdate",
    "ProjectWrite",
    "StatusChange",
    # Dashboard
    "AggregatesRead",
    "DashboardRead",
    "DashboardStats",
]
