"""Unit tests for SessionProvider."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.asyncio import Redis

from monteerly.core.exceptions import AuthError, NotAuthenticated
from monteerly.core.security import create_session_token, decode_session_token
from monteerly.models import IdentityProvider
from monteerly.services import FederatedResult, Identity, SessionProvider

pytestmark = pytest.mark.unit

STRONG_PASSWORD = "correct-horse-battery-staple-42"


@pytest.fixture
def identity() -> Identity:
    return Identity(uid="uid-1", email="ada@example.com", provider=IdentityProvider.PASSWORD)


@pytest.fixture
def backend(identity: Identity) -> MagicMock:
    backend = MagicMock()
    backend.create_user = AsyncMock(return_value=identity)
    backend.verify_password = AsyncMock(return_value=identity)
    backend.verify_federated = AsyncMock(
        return_value=FederatedResult(identity=identity, is_new=True)
    )
    backend.get_identity = AsyncMock(return_value=identity)
    return backend


@pytest.fixture
def profiles() -> MagicMock:
    profiles = MagicMock()
    profiles.ensure_profile = AsyncMock(return_value={})
    return profiles


@pytest.fixture
def provider(backend, profiles) -> SessionProvider:
    return SessionProvider(backend, profiles)


class TestObserveSession:
    def test_reports_current_state_immediately(self, provider):
        events: list = []
        provider.observe_session(events.append)
        assert events == [None]

    async def test_sign_up_then_observe_delivers_one_identity_event(self, provider, identity):
        await provider.sign_up("ada@example.com", STRONG_PASSWORD)

        events: list = []
        provider.observe_session(events.append)

        assert events == [identity]

    async def test_observer_sees_sign_in_and_sign_out(self, provider, identity):
        events: list = []
        provider.observe_session(events.append)

        await provider.sign_in("ada@example.com", "whatever-password")
        await provider.sign_out()

        assert events == [None, identity, None]

    async def test_repeated_sign_in_as_same_identity_is_not_a_change(self, provider, identity):
        events: list = []
        provider.observe_session(events.append)

        await provider.sign_in("ada@example.com", "pw")
        await provider.sign_in("ada@example.com", "pw")

        assert events == [None, identity]

    async def test_unsubscribe_stops_events(self, provider):
        events: list = []
        unsubscribe = provider.observe_session(events.append)
        unsubscribe()
        unsubscribe()

        await provider.sign_in("ada@example.com", "pw")

        assert events == [None]

    async def test_failing_observer_does_not_block_others(self, provider, identity):
        def broken(_):
            if _ is not None:
                raise RuntimeError("bug")

        events: list = []
        provider.observe_session(broken)
        provider.observe_session(events.append)

        await provider.sign_in("ada@example.com", "pw")

        assert events == [None, identity]


class TestSignUp:
    async def test_creates_user_and_profile(self, provider, backend, profiles, identity):
        result = await provider.sign_up("ada@example.com", STRONG_PASSWORD)

        assert result == identity
        assert provider.current == identity
        backend.create_user.assert_awaited_once_with("ada@example.com", STRONG_PASSWORD)
        profiles.ensure_profile.assert_awaited_once_with(identity)

    async def test_invalid_email_is_an_auth_error(self, provider, backend):
        with pytest.raises(AuthError):
            await provider.sign_up("not-an-email", STRONG_PASSWORD)
        backend.create_user.assert_not_awaited()

    async def test_weak_password_reason_is_reported(self, provider, backend):
        with pytest.raises(AuthError) as exc_info:
            await provider.sign_up("ada@example.com", "password")

        assert exc_info.value.reason
        assert not exc_info.value.reason.startswith("Value error")
        backend.create_user.assert_not_awaited()

    async def test_backend_refusal_propagates(self, provider, backend, profiles):
        backend.create_user.side_effect = AuthError("An account with this email already exists")

        with pytest.raises(AuthError, match="already exists"):
            await provider.sign_up("ada@example.com", STRONG_PASSWORD)

        profiles.ensure_profile.assert_not_awaited()
        assert provider.current is None


class TestSignIn:
    async def test_wrong_password_keeps_session_empty(self, provider, backend):
        backend.verify_password.side_effect = AuthError("Invalid email or password")

        with pytest.raises(AuthError):
            await provider.sign_in("ada@example.com", "nope")

        assert provider.current is None

    async def test_federated_sign_in_upserts_profile(self, provider, profiles, identity):
        result = await provider.sign_in_federated("id-token")

        assert result == identity
        profiles.ensure_profile.assert_awaited_once_with(identity)


class TestTokens:
    def test_issue_token_requires_session(self, provider):
        with pytest.raises(NotAuthenticated):
            provider.issue_token()

    async def test_issued_token_carries_identity(self, provider, identity):
        await provider.sign_in("ada@example.com", "pw")

        claims = decode_session_token(provider.issue_token())

        assert claims is not None
        assert claims["sub"] == identity.uid
        assert claims["provider"] == "password"
        assert claims["jti"]

    async def test_restore_resumes_session(self, provider, backend, identity):
        token = create_session_token(identity.uid, identity.email, "password")

        restored = await provider.restore(token)

        assert restored == identity
        assert provider.current == identity
        assert provider.token == token
        backend.get_identity.assert_awaited_once_with(identity.uid)

    async def test_restore_rejects_garbage(self, provider):
        with pytest.raises(NotAuthenticated):
            await provider.restore("not-a-token")

    async def test_restore_rejects_expired_token(self, provider, identity):
        token = create_session_token(
            identity.uid, identity.email, "password", expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(NotAuthenticated):
            await provider.restore(token)

    async def test_restore_rejects_deleted_identity(self, provider, backend, identity):
        backend.get_identity.return_value = None
        token = create_session_token(identity.uid, identity.email, "password")

        with pytest.raises(NotAuthenticated):
            await provider.restore(token)

    async def test_sign_out_revokes_token(self, provider, identity, mock_redis: Redis):
        token = create_session_token(identity.uid, identity.email, "password")
        await provider.restore(token)

        await provider.sign_out()

        assert provider.current is None
        fresh = SessionProvider(provider.backend, provider.profiles)
        with pytest.raises(NotAuthenticated, match="signed out"):
            await fresh.restore(token)

    async def test_sign_out_without_redis_still_clears_session(
        self, provider, identity, mock_redis_unavailable: None
    ):
        token = create_session_token(identity.uid, identity.email, "password")
        await provider.restore(token)

        await provider.sign_out()

        assert provider.current is None
        assert provider.token is None
