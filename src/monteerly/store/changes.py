"""Change feed: tells live queries that a collection changed.

Writes publish a ChangeEvent. Listeners in this process are called directly.
When Redis is available the event is also published on
`<prefix>:<collection>`, and a relay task delivers events published by other
processes to local listeners. Events carry an origin id so a process never
handles its own event twice.
"""

import asyncio
import json
from collections import defaultdict
from collections.abc import Callable
from dataclasses import asdict, dataclass
from uuid import uuid4

from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from monteerly.core.config import get_settings
from monteerly.core.logging import get_logger
from monteerly.core.redis import get_redis

logger = get_logger(__name__)

ChangeListener = Callable[["ChangeEvent"], None]


@dataclass(frozen=True)
class ChangeEvent:
    collection: str
    document_id: str
    kind: str  # created, updated, set, deleted
    origin: str

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str) -> "ChangeEvent":
        payload = json.loads(raw)
        return cls(
            collection=payload["collection"],
            document_id=payload["document_id"],
            kind=payload["kind"],
            origin=payload["origin"],
        )


class ChangeFeed:
    """Fan-out of document change events to live queries."""

    def __init__(self, channel_prefix: str | None = None) -> None:
        self.origin = uuid4().hex
        self.channel_prefix = channel_prefix or get_settings().change_channel_prefix
        self._listeners: defaultdict[str, list[ChangeListener]] = defaultdict(list)
        self._relay_task: asyncio.Task[None] | None = None

    def channel(self, collection: str) -> str:
        return f"{self.channel_prefix}:{collection}"

    def listen(self, collection: str, listener: ChangeListener) -> Callable[[], None]:
        """Register a listener for one collection. Returns a remover."""
        self._listeners[collection].append(listener)

        def remove() -> None:
            listeners = self._listeners.get(collection, [])
            if listener in listeners:
                listeners.remove(listener)

        return remove

    def listener_count(self, collection: str) -> int:
        return len(self._listeners.get(collection, []))

    async def publish(self, collection: str, document_id: str, kind: str) -> ChangeEvent:
        """Publish a change locally and, when possible, to other processes."""
        event = ChangeEvent(
            collection=collection,
            document_id=document_id,
            kind=kind,
            origin=self.origin,
        )
        self.dispatch(event)

        redis = await get_redis()
        if redis is not None:
            try:
                await redis.publish(self.channel(collection), event.to_json())
            except Exception as e:
                logger.warning(
                    "Change relay publish failed",
                    collection=collection,
                    error=str(e),
                )
        return event

    def dispatch(self, event: ChangeEvent) -> None:
        """Call every local listener of the event's collection."""
        for listener in list(self._listeners.get(event.collection, [])):
            listener(event)

    async def start_relay(self) -> bool:
        """Start relaying events from other processes. False without Redis."""
        if self._relay_task is not None:
            return True
        redis = await get_redis()
        if redis is None:
            logger.info("Change relay disabled (Redis unavailable)")
            return False
        pubsub = redis.pubsub()
        await pubsub.psubscribe(f"{self.channel_prefix}:*")
        self._relay_task = asyncio.create_task(self._relay(pubsub))
        logger.info("Change relay started", pattern=f"{self.channel_prefix}:*")
        return True

    async def _relay(self, pubsub: PubSub) -> None:
        try:
            async for message in pubsub.listen():
                if message.get("type") != "pmessage":
                    continue
                try:
                    event = ChangeEvent.from_json(message["data"])
                except (KeyError, TypeError, ValueError):
                    logger.warning("Ignoring malformed change event", data=message.get("data"))
                    continue
                if event.origin == self.origin:
                    continue
                self.dispatch(event)
        except (RedisError, OSError) as e:
            logger.error(
                "Change relay stopped, events from other processes are no longer delivered",
                error=str(e),
            )
        finally:
            await pubsub.aclose()

    async def stop_relay(self) -> None:
        if self._relay_task is None:
            return
        self._relay_task.cancel()
        try:
            await self._relay_task
        except asyncio.CancelledError:
            pass
        self._relay_task = None
        logger.info("Change relay stopped")
