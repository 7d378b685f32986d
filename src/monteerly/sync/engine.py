"""Entity sync engine: a live, ordered, locally cached view of one owner's records.

The engine opens an owner-scoped live query on the document store. Every
snapshot replaces the whole cache: raw documents are materialized, ordered
newest first, summarized, and only then are observers told. One engine owns
at most one live subscription; opening again closes the previous one first.

A subscription moves through UNSUBSCRIBED → SUBSCRIBING → ACTIVE → CLOSED.
Callbacks are checked against the engine's current handle, so a snapshot or
error still in flight when its handle was closed is dropped.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any

from monteerly.core.exceptions import NotAuthenticated, SyncError
from monteerly.core.logging import get_logger
from monteerly.models import Collection, Record
from monteerly.store.gateway import (
    OWNER_FIELD,
    DocumentStore,
    FieldFilter,
    OrderBy,
    Query,
    Snapshot,
    StoredDocument,
    StoreSubscription,
)
from monteerly.sync.aggregates import Aggregates, compute_aggregates, empty_aggregates
from monteerly.sync.materialize import CollectionSpec, spec_for

logger = get_logger(__name__)

DEFAULT_SORT_KEY = "created_at"


class SubscriptionState(str, Enum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBING = "subscribing"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass(frozen=True)
class SyncView:
    """The cache at one point in time: ordered records and their aggregates."""

    records: tuple[Record, ...]
    aggregates: Aggregates

    def __len__(self) -> int:
        return len(self.records)

    def in_status(self, *statuses: str | Enum) -> tuple[Record, ...]:
        """Records in any of `statuses`, in cache order."""
        wanted = {s.value if isinstance(s, Enum) else s for s in statuses}
        return tuple(r for r in self.records if record_value(r, "status") in wanted)


SyncObserver = Callable[[SyncView], None]
SyncErrorObserver = Callable[[SyncError], None]


class SubscriptionHandle:
    """One live query opened by an engine."""

    def __init__(
        self,
        owner_id: str,
        spec: CollectionSpec[Any],
        query: Query,
        filters: tuple[FieldFilter, ...] = (),
    ) -> None:
        self.owner_id = owner_id
        self.spec = spec
        self.query = query
        self.filters = filters
        self.state = SubscriptionState.UNSUBSCRIBED
        self.error: SyncError | None = None
        self.snapshots_received = 0
        self._subscription: StoreSubscription | None = None

    @property
    def live(self) -> bool:
        return self.state in (SubscriptionState.SUBSCRIBING, SubscriptionState.ACTIVE)

    def __repr__(self) -> str:
        return (
            f"<SubscriptionHandle {self.spec.name} owner={self.owner_id} "
            f"state={self.state.value}>"
        )


def order_records[R: Record](
    records: Iterable[R],
    sort_key: str = DEFAULT_SORT_KEY,
    descending: bool = True,
) -> list[R]:
    """Order records by an attribute, keeping arrival order for ties.

    Records without a value (a creation time not yet stamped) come first when
    descending and last when ascending.
    """

    def key(record: R) -> tuple[bool, Any]:
        value = getattr(record, sort_key, None)
        return (value is None, 0 if value is None else value)

    return sorted(records, key=key, reverse=descending)


def record_value(record: Record, name: str) -> Any:
    """A record field looked up by attribute name or by its stored (camelCase) name."""
    fields = type(record).model_fields
    if name in fields:
        return getattr(record, name)
    for attr, info in fields.items():
        if info.alias == name:
            return getattr(record, attr)
    return None


def matches_filters(record: Record, filters: Iterable[FieldFilter]) -> bool:
    return all(record_value(record, f.field) == f.value for f in filters)


def reconcile(
    spec: CollectionSpec[Any],
    documents: Iterable[StoredDocument],
    owner_fallback: str | None = None,
    sort_key: str = DEFAULT_SORT_KEY,
    descending: bool = True,
    filters: Iterable[FieldFilter] = (),
) -> SyncView:
    """Materialize, filter, order and summarize one snapshot's documents.

    Filters are matched against materialized records, so legacy spellings
    already normalized (`in-progress`) match their canonical value.
    """
    filters = tuple(filters)
    materialized = (spec.materialize(doc.id, doc.data, owner_fallback) for doc in documents)
    records = order_records(
        (record for record in materialized if matches_filters(record, filters)),
        sort_key=sort_key,
        descending=descending,
    )
    return SyncView(
        records=tuple(records),
        aggregates=compute_aggregates(records, spec.statuses),
    )


def _build_filters(
    filter_predicate: Mapping[str, Any] | None,
) -> tuple[FieldFilter, ...]:
    if not filter_predicate:
        return ()
    return tuple(
        FieldFilter(name, value) for name, value in filter_predicate.items() if name != OWNER_FIELD
    )


class EntitySyncEngine:
    """Keeps one owner's records of one collection in sync with the store."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._handle: SubscriptionHandle | None = None
        self._view: SyncView | None = None
        self._sort_key = DEFAULT_SORT_KEY
        self._descending = True
        self._observers: list[SyncObserver] = []
        self._error_observers: list[SyncErrorObserver] = []

    @property
    def handle(self) -> SubscriptionHandle | None:
        return self._handle

    @property
    def state(self) -> SubscriptionState:
        if self._handle is None:
            return SubscriptionState.UNSUBSCRIBED
        return self._handle.state

    @property
    def view(self) -> SyncView | None:
        """Latest cache, or None before the first snapshot of any subscription."""
        return self._view

    @property
    def records(self) -> tuple[Record, ...]:
        return self._view.records if self._view else ()

    @property
    def aggregates(self) -> Aggregates | None:
        return self._view.aggregates if self._view else None

    def open(
        self,
        owner_id: str | None,
        collection: str | Collection,
        filter_predicate: Mapping[str, Any] | None = None,
        sort_key: str = DEFAULT_SORT_KEY,
        descending: bool = True,
    ) -> SubscriptionHandle:
        """Start a live query for `owner_id`'s records in `collection`.

        `filter_predicate` adds equality filters on stored field names. They
        are matched against materialized records, not raw documents.
        Any subscription this engine already holds is closed first.

        Raises:
            NotAuthenticated: `owner_id` is empty.
            KeyError: `collection` is not a record collection.
        """
        if not owner_id:
            raise NotAuthenticated("A signed-in session is required to sync records")

        spec = spec_for(collection)
        if self._handle is not None:
            self.close(self._handle)

        query = Query(collection=spec.name, order_by=OrderBy()).where(OWNER_FIELD, owner_id)
        handle = SubscriptionHandle(owner_id, spec, query, _build_filters(filter_predicate))
        self._handle = handle
        self._sort_key = sort_key
        self._descending = descending
        self._view = SyncView(records=(), aggregates=empty_aggregates(spec.statuses))

        handle.state = SubscriptionState.SUBSCRIBING
        handle._subscription = self._store.subscribe(
            query,
            partial(self._on_snapshot, handle),
            partial(self._on_error, handle),
        )
        logger.info("Live query opened", collection=spec.name, owner_id=owner_id)
        return handle

    def close(self, handle: SubscriptionHandle | None = None) -> None:
        """Release a live query (the current one by default). Idempotent."""
        handle = handle or self._handle
        if handle is None:
            return
        if self._handle is handle:
            self._handle = None
        if handle.state is SubscriptionState.CLOSED:
            return
        handle.state = SubscriptionState.CLOSED
        if handle._subscription is not None:
            handle._subscription.cancel()
        logger.info("Live query closed", collection=handle.spec.name, owner_id=handle.owner_id)

    def _is_current(self, handle: SubscriptionHandle) -> bool:
        return handle is self._handle and handle.live

    def _on_snapshot(self, handle: SubscriptionHandle, snapshot: Snapshot) -> None:
        if not self._is_current(handle):
            logger.debug("Dropping snapshot for closed live query", collection=handle.spec.name)
            return

        view = reconcile(
            handle.spec,
            snapshot.documents,
            owner_fallback=handle.owner_id,
            sort_key=self._sort_key,
            descending=self._descending,
            filters=handle.filters,
        )
        self._view = view
        handle.state = SubscriptionState.ACTIVE
        handle.snapshots_received += 1

        for observer in list(self._observers):
            try:
                observer(view)
            except Exception:
                logger.exception("Sync observer failed", collection=handle.spec.name)

    def _on_error(self, handle: SubscriptionHandle, error: Exception) -> None:
        if not self._is_current(handle):
            return

        sync_error = (
            error
            if isinstance(error, SyncError)
            else SyncError(f"Live query on {handle.spec.name} failed: {error}")
        )
        handle.error = sync_error
        self.close(handle)
        logger.warning(
            "Live query ended with an error",
            collection=handle.spec.name,
            error=sync_error.message,
        )

        for observer in list(self._error_observers):
            try:
                observer(sync_error)
            except Exception:
                logger.exception("Sync error observer failed", collection=handle.spec.name)

    def add_observer(self, observer: SyncObserver) -> Callable[[], None]:
        """Call `observer` with the new view after every snapshot. Returns a remover."""
        self._observers.append(observer)
        return partial(_remove, self._observers, observer)

    def add_error_observer(self, observer: SyncErrorObserver) -> Callable[[], None]:
        self._error_observers.append(observer)
        return partial(_remove, self._error_observers, observer)

    def filtered(self, status: str | Enum | None = None) -> tuple[Record, ...]:
        """Cached records in one status, or all of them when status is None."""
        if status is None:
            return self.records
        wanted = status.value if isinstance(status, Enum) else status
        return tuple(r for r in self.records if record_value(r, "status") == wanted)

    def recent(self, limit: int = 5) -> tuple[Record, ...]:
        return self.records[:limit]


def _remove(observers: list[Any], observer: Any) -> None:
    if observer in observers:
        observers.remove(observer)
