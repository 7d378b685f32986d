"""Document store gateway and its SQL implementation."""

from monteerly.store.changes import ChangeEvent, ChangeFeed
from monteerly.store.gateway import (
    CREATED_AT_FIELD,
    OWNER_FIELD,
    DocumentStore,
    ErrorCallback,
    FieldFilter,
    OrderBy,
    Query,
    Snapshot,
    SnapshotCallback,
    StoredDocument,
    StoreSubscription,
    apply_query,
)
from monteerly.store.sql import QuerySubscription, SqlDocumentStore

__all__ = [
    "CREATED_AT_FIELD",
    "OWNER_FIELD",
    "ChangeEvent",
    "ChangeFeed",
    "DocumentStore",
    "ErrorCallback",
    "FieldFilter",
    "OrderBy",
    "Query",
    "QuerySubscription",
    "Snapshot",
    "SnapshotCallback",
    "SqlDocumentStore",
    "StoreSubscription",
    "StoredDocument",
    "apply_query",
]
