"""Keep an engine's live query pointed at whoever is signed in."""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from monteerly.core.logging import get_logger
from monteerly.models import Collection
from monteerly.sync.engine import EntitySyncEngine

if TYPE_CHECKING:
    from monteerly.services.identity import Identity
    from monteerly.services.session_provider import SessionProvider

logger = get_logger(__name__)


class IdentityScopedSync:
    """Re-opens the engine's subscription whenever the session identity changes.

    Signing out closes the subscription; a different identity signing in
    replaces it. Use as a context manager or call start()/stop().
    """

    def __init__(
        self,
        provider: "SessionProvider",
        engine: EntitySyncEngine,
        collection: str | Collection,
        filter_predicate: Mapping[str, Any] | None = None,
    ) -> None:
        self.provider = provider
        self.engine = engine
        self.collection = collection
        self.filter_predicate = filter_predicate
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def started(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.provider.observe_session(self._on_identity)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.engine.close()

    def __enter__(self) -> "IdentityScopedSync":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _on_identity(self, identity: "Identity | None") -> None:
        if identity is None:
            self.engine.close()
            return

        handle = self.engine.handle
        if handle is not None and handle.live and handle.owner_id == identity.uid:
            return

        logger.debug("Following session identity", uid=identity.uid)
        self.engine.open(identity.uid, self.collection, self.filter_predicate)
