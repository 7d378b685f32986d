"""Status transitions for projects and briefs.

The tables below are the only source of truth for which status changes are
allowed. A legal change is written to the store as a single-field update and
nothing is re-read; live subscriptions pick the change up. There is no
compare-and-swap, so two concurrent transitions on one record race and the
last write wins.
"""

from collections.abc import Mapping
from enum import Enum

from monteerly.core.exceptions import IllegalTransition
from monteerly.core.logging import get_logger
from monteerly.models import BriefStatus, Collection, ProjectStatus, Record
from monteerly.store import DocumentStore

logger = get_logger(__name__)

PROJECT_TRANSITIONS: Mapping[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.DRAFT: frozenset({ProjectStatus.HIRING}),
    ProjectStatus.HIRING: frozenset({ProjectStatus.IN_PROGRESS}),
    ProjectStatus.IN_PROGRESS: frozenset({ProjectStatus.REVIEW}),
    ProjectStatus.REVIEW: frozenset({ProjectStatus.COMPLETED}),
    ProjectStatus.COMPLETED: frozenset(),
}

BRIEF_TRANSITIONS: Mapping[BriefStatus, frozenset[BriefStatus]] = {
    BriefStatus.PENDING: frozenset({BriefStatus.ACCEPTED, BriefStatus.REJECTED}),
    BriefStatus.ACCEPTED: frozenset({BriefStatus.IN_PROGRESS}),
    BriefStatus.IN_PROGRESS: frozenset({BriefStatus.COMPLETED}),
    BriefStatus.COMPLETED: frozenset(),
    BriefStatus.REJECTED: frozenset(),
}

TRANSITION_TABLES: Mapping[Collection, Mapping[Enum, frozenset[Enum]]] = {
    Collection.PROJECTS: PROJECT_TRANSITIONS,  # type: ignore[dict-item]
    Collection.BRIEFS: BRIEF_TRANSITIONS,  # type: ignore[dict-item]
}


def legal_next_states(record: Record) -> frozenset[Enum]:
    table = TRANSITION_TABLES[record.collection]
    return table.get(record.status, frozenset())  # type: ignore[attr-defined]


def status_value(target: str | Enum) -> str:
    return target.value if isinstance(target, Enum) else str(target)


def is_legal(record: Record, target: str | Enum) -> bool:
    wanted = status_value(target)
    return any(state.value == wanted for state in legal_next_states(record))


class StatusTransitionController:
    """Moves records between statuses according to the transition tables."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def legal_next_states(self, record: Record) -> frozenset[Enum]:
        return legal_next_states(record)

    async def transition(self, record: Record, target: str | Enum) -> None:
        """Write `target` as the record's status.

        Raises:
            IllegalTransition: `target` is not reachable from the record's
                current status. The store is not touched.
            StoreError: the update failed. Nothing is rolled back.
        """
        current = record.status.value  # type: ignore[attr-defined]
        wanted = status_value(target)
        if not is_legal(record, wanted):
            logger.info(
                "Transition refused",
                collection=record.collection.value,
                document_id=record.id,
                current=current,
                target=wanted,
            )
            raise IllegalTransition(current, wanted)

        await self.store.update(record.collection.value, record.id, {"status": wanted})
        logger.info(
            "Status changed",
            collection=record.collection.value,
            document_id=record.id,
            previous=current,
            status=wanted,
        )
