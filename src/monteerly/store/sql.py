"""SQL-backed document store.

Documents live in one `documents` table as JSON. Writes commit, then publish a
change event; each live query re-reads its result set when its collection
changes and hands the full snapshot to its subscriber.
"""

import asyncio
from collections.abc import Callable, Mapping
from typing import Any
from uuid import uuid4

from pydantic_core import to_jsonable_python
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from monteerly.core.db import get_session
from monteerly.core.exceptions import NotFound, StoreError
from monteerly.core.logging import get_logger
from monteerly.models import Document
from monteerly.models.base import utc_now
from monteerly.repositories import DocumentRepository
from monteerly.store.changes import ChangeEvent, ChangeFeed
from monteerly.store.gateway import (
    CREATED_AT_FIELD,
    OWNER_FIELD,
    ErrorCallback,
    Query,
    Snapshot,
    SnapshotCallback,
    StoredDocument,
    apply_query,
)

logger = get_logger(__name__)

LEGACY_OWNER_FIELD = "userId"


def new_document_id() -> str:
    """Opaque 20-character document id."""
    return uuid4().hex[:20]


def _to_json_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    return to_jsonable_python(dict(fields))  # type: ignore[no-any-return]


def _owner_of(data: Mapping[str, Any]) -> str | None:
    owner = data.get(OWNER_FIELD) or data.get(LEGACY_OWNER_FIELD)
    return str(owner) if owner else None


class SqlDocumentStore:
    """DocumentStore over the `documents` table."""

    def __init__(
        self,
        engine: AsyncEngine | None = None,
        feed: ChangeFeed | None = None,
        id_factory: Callable[[], str] = new_document_id,
    ) -> None:
        self._engine = engine
        self.feed = feed or ChangeFeed()
        self._id_factory = id_factory

    async def create(self, collection: str, fields: Mapping[str, Any]) -> str:
        document_id = self._id_factory()
        now = utc_now()
        data = _to_json_fields({**fields, CREATED_AT_FIELD: now})
        try:
            async with get_session(self._engine) as session:
                DocumentRepository(session).add(
                    Document(
                        collection=collection,
                        id=document_id,
                        owner_id=_owner_of(data),
                        data=data,
                        created_at=now,
                        updated_at=now,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not create document in {collection}") from e

        logger.debug("Document created", collection=collection, document_id=document_id)
        await self.feed.publish(collection, document_id, "created")
        return document_id

    async def get(self, collection: str, document_id: str) -> dict[str, Any]:
        try:
            async with get_session(self._engine) as session:
                document = await DocumentRepository(session).get_document(collection, document_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read {collection}/{document_id}") from e
        if document is None:
            raise NotFound(collection, document_id)
        return dict(document.data)

    async def update(
        self, collection: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        try:
            async with get_session(self._engine) as session:
                repo = DocumentRepository(session)
                document = await repo.get_document(collection, document_id)
                if document is None:
                    raise NotFound(collection, document_id)
                merged = {**document.data, **_to_json_fields(fields)}
                document.data = merged
                document.owner_id = _owner_of(merged)
                document.updated_at = utc_now()
                repo.add(document)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not update {collection}/{document_id}") from e

        await self.feed.publish(collection, document_id, "updated")

    async def set(
        self,
        collection: str,
        document_id: str,
        fields: Mapping[str, Any],
        *,
        merge: bool = True,
    ) -> None:
        now = utc_now()
        incoming = _to_json_fields(fields)
        try:
            async with get_session(self._engine) as session:
                repo = DocumentRepository(session)
                document = await repo.get_document(collection, document_id)
                if document is None:
                    document = Document(
                        collection=collection,
                        id=document_id,
                        data=incoming,
                        created_at=now,
                    )
                elif merge:
                    document.data = {**document.data, **incoming}
                else:
                    document.data = incoming
                document.owner_id = _owner_of(document.data)
                document.updated_at = now
                repo.add(document)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not write {collection}/{document_id}") from e

        await self.feed.publish(collection, document_id, "set")

    async def delete(self, collection: str, document_id: str) -> None:
        try:
            async with get_session(self._engine) as session:
                repo = DocumentRepository(session)
                document = await repo.get_document(collection, document_id)
                if document is None:
                    return
                await repo.remove(document)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not delete {collection}/{document_id}") from e

        await self.feed.publish(collection, document_id, "deleted")

    async def query(self, query: Query) -> list[StoredDocument]:
        try:
            async with get_session(self._engine) as session:
                rows = await DocumentRepository(session).list_collection(
                    query.collection, owner_id=query.owner_id
                )
        except SQLAlchemyError as e:
            raise StoreError(f"Could not query {query.collection}") from e

        # The owner filter already ran in SQL; the rest is evaluated here.
        remaining = Query(
            collection=query.collection,
            filters=tuple(f for f in query.filters if f.field != OWNER_FIELD),
            order_by=query.order_by,
        )
        return apply_query(
            remaining, (StoredDocument(id=row.id, data=dict(row.data)) for row in rows)
        )

    def subscribe(
        self,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> "QuerySubscription":
        return QuerySubscription(self, query, on_snapshot, on_error)


class QuerySubscription:
    """A live query: one consumer task re-reads the result set after each change.

    Changes that arrive while a read is running coalesce into one more read,
    so snapshots are delivered one at a time and in order. A failed read is
    terminal: the error callback fires once and the subscription stops.
    """

    def __init__(
        self,
        store: SqlDocumentStore,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None,
    ) -> None:
        self._store = store
        self._query = query
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._active = True
        self._dirty = asyncio.Event()
        self._dirty.set()  # initial snapshot
        self._remove_listener = store.feed.listen(query.collection, self._on_change)
        self._task = asyncio.get_running_loop().create_task(self._run())

    @property
    def active(self) -> bool:
        return self._active

    def _on_change(self, event: ChangeEvent) -> None:
        if self._active:
            self._dirty.set()

    async def _run(self) -> None:
        while self._active:
            await self._dirty.wait()
            self._dirty.clear()
            try:
                documents = await self._store.query(self._query)
            except Exception as e:
                self._stop()
                logger.warning(
                    "Live query failed",
                    collection=self._query.collection,
                    error=str(e),
                )
                if self._on_error is not None:
                    self._on_error(e)
                return
            if not self._active:
                return
            self._on_snapshot(Snapshot(query=self._query, documents=tuple(documents)))

    def _stop(self) -> None:
        self._active = False
        self._remove_listener()

    def cancel(self) -> None:
        """Stop the live query. Safe to call more than once."""
        if self._active:
            self._stop()
        if not self._task.done():
            self._task.cancel()
