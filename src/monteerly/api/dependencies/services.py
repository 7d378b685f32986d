"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from monteerly.api.dependencies.store import StoreDep
from monteerly.services import (
    BriefService,
    IdentityBackend,
    ProfileService,
    ProjectService,
    SessionProvider,
    SqlIdentityBackend,
)


def get_identity_backend() -> IdentityBackend:
    return SqlIdentityBackend()


IdentityBackendDep = Annotated[IdentityBackend, Depends(get_identity_backend)]


def get_session_provider(store: StoreDep, backend: IdentityBackendDep) -> SessionProvider:
    """A fresh session context for this request."""
    return SessionProvider(backend, ProfileService(store))


def get_project_service(store: StoreDep) -> ProjectService:
    return ProjectService(store)


def get_brief_service(store: StoreDep) -> BriefService:
    return BriefService(store)


SessionProviderDep = Annotated[SessionProvider, Depends(get_session_provider)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
BriefServiceDep = Annotated[BriefService, Depends(get_brief_service)]
