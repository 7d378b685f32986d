"""Document store gateway contract.

Everything above the store talks to it through `DocumentStore`: named
collections of JSON documents, equality queries, and live subscriptions that
deliver full snapshots (never deltas) of a query's result set.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from monteerly.models.base import utc_now

OWNER_FIELD = "ownerId"
CREATED_AT_FIELD = "createdAt"


@dataclass(frozen=True)
class FieldFilter:
    """Equality filter on one document field."""

    field: str
    value: Any

    def matches(self, data: Mapping[str, Any]) -> bool:
        return data.get(self.field) == self.value


@dataclass(frozen=True)
class OrderBy:
    field: str = CREATED_AT_FIELD
    descending: bool = True


@dataclass(frozen=True)
class Query:
    """A filtered, optionally ordered view of one collection."""

    collection: str
    filters: tuple[FieldFilter, ...] = ()
    order_by: OrderBy | None = None

    def where(self, field_name: str, value: Any) -> "Query":
        return Query(
            collection=self.collection,
            filters=(*self.filters, FieldFilter(field_name, value)),
            order_by=self.order_by,
        )

    def ordered(self, order_by: OrderBy | None) -> "Query":
        return Query(collection=self.collection, filters=self.filters, order_by=order_by)

    @property
    def owner_id(self) -> str | None:
        """The owner this query is scoped to, if any."""
        for f in self.filters:
            if f.field == OWNER_FIELD:
                return f.value  # type: ignore[no-any-return]
        return None


@dataclass(frozen=True)
class StoredDocument:
    id: str
    data: Mapping[str, Any]


@dataclass(frozen=True)
class Snapshot:
    """Full result set of a query at one point in time."""

    query: Query
    documents: tuple[StoredDocument, ...]
    read_at: datetime = field(default_factory=utc_now)

    def __len__(self) -> int:
        return len(self.documents)


SnapshotCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[[Exception], None]


class StoreSubscription(Protocol):
    """Registration of a live query. Cancelling stops all further callbacks."""

    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class DocumentStore(Protocol):
    """Operations the studio needs from a document database."""

    async def create(self, collection: str, fields: Mapping[str, Any]) -> str:
        """Insert a document, stamping `createdAt` with the store clock. Returns its id."""
        ...

    async def get(self, collection: str, document_id: str) -> dict[str, Any]:
        """Return a document's fields. Raises NotFound."""
        ...

    async def update(
        self, collection: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        """Merge `fields` into an existing document. Raises NotFound."""
        ...

    async def set(
        self,
        collection: str,
        document_id: str,
        fields: Mapping[str, Any],
        *,
        merge: bool = True,
    ) -> None:
        """Write a document under a caller-chosen id, merging or replacing."""
        ...

    async def delete(self, collection: str, document_id: str) -> None:
        """Remove a document. Deleting a missing document is not an error."""
        ...

    async def query(self, query: Query) -> list[StoredDocument]:
        """Run a query once."""
        ...

    def subscribe(
        self,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> StoreSubscription:
        """Start a live query. The first snapshot is delivered asynchronously."""
        ...


def _sort_value(value: Any) -> tuple[int, Any]:
    # Missing values (e.g. a createdAt not yet stamped) sort as the largest.
    if value is None:
        return (1, "")
    if isinstance(value, bool | int | float):
        return (0, value)
    return (0, str(value))


def apply_query(query: Query, documents: Iterable[StoredDocument]) -> list[StoredDocument]:
    """Evaluate a query's filters and ordering over documents in memory.

    Sorting is stable, so documents with equal keys keep their input order.
    """
    matched = [
        doc for doc in documents if all(f.matches(doc.data) for f in query.filters)
    ]
    if query.order_by is not None:
        key_field = query.order_by.field
        matched.sort(
            key=lambda doc: _sort_value(doc.data.get(key_field)),
            reverse=query.order_by.descending,
        )
    return matched
