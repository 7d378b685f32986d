"""FastAPI dependency injection definitions."""

from monteerly.api.dependencies.auth import (
    CurrentIdentity,
    bearer_token,
    get_current_identity,
)
from monteerly.api.dependencies.services import (
    BriefServiceDep,
    IdentityBackendDep,
    ProjectServiceDep,
    SessionProviderDep,
    get_brief_service,
    get_identity_backend,
    get_project_service,
    get_session_provider,
)
from monteerly.api.dependencies.store import StoreDep, get_document_store

__all__ = [
    # Store
    "StoreDep",
    "get_document_store",
    # Auth
    "CurrentIdentity",
    "bearer_token",
    "get_current_identity",
    # Services
    "BriefServiceDep",
    "IdentityBackendDep",
    "ProjectServiceDep",
    "SessionProviderDep",
    "get_brief_service",
    "get_identity_backend",
    "get_project_service",
    "get_session_provider",
]
