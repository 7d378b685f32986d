"""Entity sync: live, owner-scoped local views of record collections."""

from monteerly.sync.aggregates import Aggregates, compute_aggregates, empty_aggregates
from monteerly.sync.engine import (
    EntitySyncEngine,
    SubscriptionHandle,
    SubscriptionState,
    SyncView,
    order_records,
    reconcile,
)
from monteerly.sync.materialize import (
    BRIEFS,
    PROJECTS,
    CollectionSpec,
    materialize_brief,
    materialize_project,
    spec_for,
)
from monteerly.sync.scoped import IdentityScopedSync

__all__ = [
    "BRIEFS",
    "PROJECTS",
    "Aggregates",
    "CollectionSpec",
    "EntitySyncEngine",
    "IdentityScopedSync",
    "SubscriptionHandle",
    "SubscriptionState",
    "SyncView",
    "compute_aggregates",
    "empty_aggregates",
    "materialize_brief",
    "materialize_project",
    "order_records",
    "reconcile",
    "spec_for",
]
