"""Test doubles for the document store."""

import asyncio
from collections.abc import Mapping
from typing import Any
from uuid import uuid4

from monteerly.core.exceptions import NotFound
from monteerly.models.base import utc_now
from monteerly.store import (
    CREATED_AT_FIELD,
    ErrorCallback,
    Query,
    Snapshot,
    SnapshotCallback,
    StoredDocument,
    apply_query,
)


class ScriptedSubscription:
    """A subscription whose snapshots and errors are pushed by the test."""

    def __init__(
        self, query: Query, on_snapshot: SnapshotCallback, on_error: ErrorCallback | None
    ) -> None:
        self.query = query
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.cancelled = 0

    @property
    def active(self) -> bool:
        return self.cancelled == 0

    def cancel(self) -> None:
        self.cancelled += 1

    def emit(self, *documents: StoredDocument | tuple[str, Mapping[str, Any]]) -> None:
        """Deliver a snapshot, even after cancel (an in-flight delivery)."""
        docs = tuple(
            d if isinstance(d, StoredDocument) else StoredDocument(id=d[0], data=d[1])
            for d in documents
        )
        self.on_snapshot(Snapshot(query=self.query, documents=docs))

    def fail(self, error: Exception) -> None:
        assert self.on_error is not None
        self.on_error(error)


class ScriptedStore:
    """Records subscriptions so tests decide exactly when snapshots arrive."""

    def __init__(self) -> None:
        self.subscriptions: list[ScriptedSubscription] = []

    @property
    def latest(self) -> ScriptedSubscription:
        return self.subscriptions[-1]

    def subscribe(
        self,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> ScriptedSubscription:
        subscription = ScriptedSubscription(query, on_snapshot, on_error)
        self.subscriptions.append(subscription)
        return subscription


class MemoryStore:
    """A small in-memory DocumentStore with live queries.

    Every write re-delivers a full snapshot to each matching subscription on
    the next loop iteration.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._subscriptions: list[_MemorySubscription] = []

    def _docs(self, collection: str) -> dict[str, dict[str, Any]]:
        return self.collections.setdefault(collection, {})

    async def create(self, collection: str, fields: Mapping[str, Any]) -> str:
        document_id = uuid4().hex[:20]
        self._docs(collection)[document_id] = {**fields, CREATED_AT_FIELD: utc_now()}
        self._changed(collection)
        return document_id

    async def get(self, collection: str, document_id: str) -> dict[str, Any]:
        try:
            return dict(self._docs(collection)[document_id])
        except KeyError:
            raise NotFound(collection, document_id) from None

    async def update(self, collection: str, document_id: str, fields: Mapping[str, Any]) -> None:
        if document_id not in self._docs(collection):
            raise NotFound(collection, document_id)
        self._docs(collection)[document_id].update(fields)
        self._changed(collection)

    async def set(
        self,
        collection: str,
        document_id: str,
        fields: Mapping[str, Any],
        *,
        merge: bool = True,
    ) -> None:
        existing = self._docs(collection).get(document_id, {}) if merge else {}
        self._docs(collection)[document_id] = {**existing, **fields}
        self._changed(collection)

    async def delete(self, collection: str, document_id: str) -> None:
        if self._docs(collection).pop(document_id, None) is not None:
            self._changed(collection)

    async def query(self, query: Query) -> list[StoredDocument]:
        return apply_query(
            query,
            [StoredDocument(id=k, data=dict(v)) for k, v in self._docs(query.collection).items()],
        )

    def subscribe(
        self,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> "_MemorySubscription":
        subscription = _MemorySubscription(self, query, on_snapshot)
        self._subscriptions.append(subscription)
        subscription.schedule()
        return subscription

    def _changed(self, collection: str) -> None:
        for subscription in self._subscriptions:
            if subscription.active and subscription.query.collection == collection:
                subscription.schedule()


class _MemorySubscription:
    def __init__(self, store: MemoryStore, query: Query, on_snapshot: SnapshotCallback) -> None:
        self.store = store
        self.query = query
        self.on_snapshot = on_snapshot
        self.active = True

    def schedule(self) -> None:
        asyncio.get_running_loop().create_task(self._deliver())

    async def _deliver(self) -> None:
        documents = await self.store.query(self.query)
        if self.active:
            self.on_snapshot(Snapshot(query=self.query, documents=tuple(documents)))

    def cancel(self) -> None:
        self.active = False
