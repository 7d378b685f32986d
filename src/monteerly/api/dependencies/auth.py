"""Authentication dependencies."""

from typing import Annotated

from fastapi import Depends, Header

from monteerly.api.dependencies.services import SessionProviderDep
from monteerly.core.exceptions import NotAuthenticated
from monteerly.services import Identity


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise NotAuthenticated("Missing or invalid authorization header")
    return authorization[7:]


async def get_current_identity(
    provider: SessionProviderDep,
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Restore the request's session from its bearer token.

    The provider is cached per request, so handlers that also depend on it
    see the restored session.
    """
    return await provider.restore(bearer_token(authorization))


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
