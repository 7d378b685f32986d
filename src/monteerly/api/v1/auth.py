"""Authentication endpoints."""

from fastapi import APIRouter, status
from starlette.requests import Request

from monteerly.api.dependencies import CurrentIdentity, SessionProviderDep
from monteerly.core.rate_limit import limiter, signin_limit
from monteerly.schemas.auth import (
    CredentialsRequest,
    FederatedSignInRequest,
    IdentityRead,
    SessionResponse,
)
from monteerly.services import SessionProvider

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_response(provider: SessionProvider) -> SessionResponse:
    token = provider.issue_token()
    return SessionResponse(
        access_token=token,
        identity=IdentityRead.from_identity(provider.require()),
    )


@router.post(
    "/signup",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Account created and signed in"},
        400: {"description": "Invalid email, weak password, or email already in use"},
    },
)
@limiter.limit(signin_limit)
async def signup(
    request: Request, data: CredentialsRequest, provider: SessionProviderDep
) -> SessionResponse:
    """Create a password account, create its profile, and start a session."""
    await provider.sign_up(data.email, data.password)
    return _session_response(provider)


@router.post(
    "/signin",
    response_model=SessionResponse,
    responses={
        200: {"description": "Signed in"},
        400: {"description": "Invalid email or password"},
    },
)
@limiter.limit(signin_limit)
async def signin(
    request: Request, data: CredentialsRequest, provider: SessionProviderDep
) -> SessionResponse:
    await provider.sign_in(data.email, data.password)
    return _session_response(provider)


@router.post(
    "/federated",
    response_model=SessionResponse,
    responses={
        200: {"description": "Signed in with the federated provider"},
        400: {"description": "Token rejected or federated sign-in not configured"},
    },
)
@limiter.limit(signin_limit)
async def federated_signin(
    request: Request, data: FederatedSignInRequest, provider: SessionProviderDep
) -> SessionResponse:
    """Exchange a federated ID token for a session. The first sign-in creates the account."""
    await provider.sign_in_federated(data.id_token)
    return _session_response(provider)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
async def signout(_identity: CurrentIdentity, provider: SessionProviderDep) -> None:
    """End the session. The token stops working when Redis is available."""
    await provider.sign_out()


@router.get("/session", response_model=IdentityRead)
async def current_session(identity: CurrentIdentity) -> IdentityRead:
    return IdentityRead.from_identity(identity)
