"""Session provider: the one place that knows who is signed in.

A provider instance is a session context. It is created per client (per
request on the HTTP surface) and passed explicitly to whatever needs the
current identity; there is no module-level session.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from monteerly.core.cache import is_session_revoked, revoke_session
from monteerly.core.exceptions import AuthError, NotAuthenticated
from monteerly.core.logging import bind_session_context, get_logger
from monteerly.core.security import create_session_token, decode_session_token
from monteerly.schemas.auth import SignInRequest, SignUpRequest
from monteerly.services.identity import Identity, IdentityBackend
from monteerly.services.profile_service import ProfileService

logger = get_logger(__name__)

SessionObserver = Callable[[Identity | None], None]


def _first_error(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid credentials"
    message = str(errors[0].get("msg", "Invalid credentials"))
    return message.removeprefix("Value error, ")


class SessionProvider:
    """Sign-up, sign-in, sign-out and observation of the current identity."""

    def __init__(self, backend: IdentityBackend, profiles: ProfileService):
        self.backend = backend
        self.profiles = profiles
        self._current: Identity | None = None
        self._token: str | None = None
        self._token_claims: dict[str, Any] | None = None
        self._observers: list[SessionObserver] = []

    @property
    def current(self) -> Identity | None:
        return self._current

    @property
    def token(self) -> str | None:
        return self._token

    def require(self) -> Identity:
        """The current identity. Raises NotAuthenticated when signed out."""
        if self._current is None:
            raise NotAuthenticated()
        return self._current

    def observe_session(self, callback: SessionObserver) -> Callable[[], None]:
        """Report the current identity now and after every change.

        Returns a function that unregisters the callback.
        """
        self._observers.append(callback)
        callback(self._current)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    async def sign_up(self, email: str, password: str) -> Identity:
        try:
            request = SignUpRequest(email=email, password=password)
        except PydanticValidationError as e:
            raise AuthError(_first_error(e)) from e

        identity = await self.backend.create_user(str(request.email), request.password)
        await self.profiles.ensure_profile(identity)
        self._set_current(identity)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        try:
            request = SignInRequest(email=email, password=password)
        except PydanticValidationError as e:
            raise AuthError(_first_error(e)) from e

        identity = await self.backend.verify_password(str(request.email), request.password)
        self._set_current(identity)
        return identity

    async def sign_in_federated(self, id_token: str) -> Identity:
        result = await self.backend.verify_federated(id_token)
        await self.profiles.ensure_profile(result.identity)
        self._set_current(result.identity)
        return result.identity

    async def sign_out(self) -> None:
        """End the session. An issued token is revoked when Redis is available."""
        claims = self._token_claims
        if claims and claims.get("jti"):
            ttl = int(claims.get("exp", 0) - datetime.now(UTC).timestamp())
            if not await revoke_session(str(claims["jti"]), ttl):
                logger.warning("Session token not revoked, valid until expiry", jti=claims["jti"])
        self._token = None
        self._token_claims = None
        self._set_current(None)

    def issue_token(self) -> str:
        """Sign a session token for the current identity."""
        identity = self.require()
        token = create_session_token(identity.uid, identity.email, identity.provider.value)
        self._token = token
        self._token_claims = decode_session_token(token)
        return token

    async def restore(self, token: str) -> Identity:
        """Resume the session a token was issued for.

        Raises:
            NotAuthenticated: the token is invalid, expired, revoked, or its
                identity no longer exists.
        """
        claims = decode_session_token(token)
        if claims is None:
            raise NotAuthenticated("Invalid or expired session token")

        if claims.get("jti") and await is_session_revoked(str(claims["jti"])):
            raise NotAuthenticated("Session has been signed out")

        identity = await self.backend.get_identity(str(claims["sub"]))
        if identity is None:
            raise NotAuthenticated("Session identity no longer exists")

        self._token = token
        self._token_claims = claims
        self._set_current(identity)
        return identity

    def _set_current(self, identity: Identity | None) -> None:
        if identity == self._current:
            return
        self._current = identity
        bind_session_context(identity.uid if identity else None)
        logger.info("Session changed", signed_in=identity is not None)

        for observer in list(self._observers):
            try:
                observer(identity)
            except Exception:
                logger.exception("Session observer failed")
