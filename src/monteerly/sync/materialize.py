"""Raw document → Record conversion.

Each materializer is total: any mapping yields a valid record. Missing or
unusable fields take the collection's defaults (initial status, `unfunded`
escrow, zero budget, no deadline). Legacy spellings written by older clients
(`userId` for the owner, `in-progress` for statuses) are normalized here and
nowhere else.
"""

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from enum import Enum
from typing import Any

from monteerly.models import (
    Brief,
    BriefStatus,
    Collection,
    EscrowStatus,
    Project,
    ProjectStatus,
    Record,
)

# Epoch numbers above this are milliseconds rather than seconds.
_MILLISECONDS_THRESHOLD = 100_000_000_000


def coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def coerce_amount(value: Any) -> float:
    """A non-negative finite number, or 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if not isinstance(value, int | float):
        return 0
    try:
        value = float(value)
    except OverflowError:
        return 0
    if math.isnan(value) or math.isinf(value) or value < 0:
        return 0
    return value


def coerce_timestamp(value: Any) -> datetime | None:
    """An aware UTC datetime from the shapes timestamps are stored in."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if isinstance(value, int | float):
        try:
            number = float(value)
            if math.isnan(number) or math.isinf(number):
                return None
            seconds = number / 1000 if abs(number) >= _MILLISECONDS_THRESHOLD else number
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    if isinstance(value, Mapping) and "seconds" in value:
        # {"seconds": ..., "nanoseconds": ...} as exported by hosted document stores
        seconds = coerce_amount(value.get("seconds"))
        nanos = coerce_amount(value.get("nanoseconds"))
        try:
            return datetime.fromtimestamp(seconds + nanos / 1_000_000_000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def coerce_enum[E: Enum](enum_type: type[E], value: Any, default: E) -> E:
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        return default
    normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return enum_type(normalized)
    except ValueError:
        return default


def owner_of(raw: Mapping[str, Any], fallback: str | None = None) -> str:
    return coerce_text(raw.get("ownerId") or raw.get("userId") or fallback)


def _common_fields(
    document_id: str, raw: Mapping[str, Any], owner_fallback: str | None
) -> dict[str, Any]:
    return {
        "id": document_id,
        "owner_id": owner_of(raw, owner_fallback),
        "title": coerce_text(raw.get("title")),
        "description": coerce_text(raw.get("description")),
        "budget": coerce_amount(raw.get("budget")),
        "deadline": coerce_timestamp(raw.get("deadline")),
        "created_at": coerce_timestamp(raw.get("createdAt")),
    }


def materialize_project(
    document_id: str, raw: Mapping[str, Any], owner_fallback: str | None = None
) -> Project:
    return Project(
        **_common_fields(document_id, raw, owner_fallback),
        status=coerce_enum(ProjectStatus, raw.get("status"), ProjectStatus.DRAFT),
        escrow_status=coerce_enum(
            EscrowStatus, raw.get("escrowStatus"), EscrowStatus.UNFUNDED
        ),
    )


def materialize_brief(
    document_id: str, raw: Mapping[str, Any], owner_fallback: str | None = None
) -> Brief:
    return Brief(
        **_common_fields(document_id, raw, owner_fallback),
        status=coerce_enum(BriefStatus, raw.get("status"), BriefStatus.PENDING),
        client_name=coerce_text(raw.get("clientName")),
    )


@dataclass(frozen=True)
class CollectionSpec[R: Record]:
    """How one record collection is materialized and summarized."""

    collection: Collection
    statuses: type[Enum]
    initial_status: Enum
    materialize: Callable[[str, Mapping[str, Any], str | None], R]

    @property
    def name(self) -> str:
        return self.collection.value


PROJECTS = CollectionSpec[Project](
    collection=Collection.PROJECTS,
    statuses=ProjectStatus,
    initial_status=ProjectStatus.DRAFT,
    materialize=materialize_project,
)

BRIEFS = CollectionSpec[Brief](
    collection=Collection.BRIEFS,
    statuses=BriefStatus,
    initial_status=BriefStatus.PENDING,
    materialize=materialize_brief,
)

COLLECTION_SPECS: dict[str, CollectionSpec[Any]] = {
    PROJECTS.name: PROJECTS,
    BRIEFS.name: BRIEFS,
}


def spec_for(collection: str | Collection) -> CollectionSpec[Any]:
    """Settings for a record collection. Raises KeyError for non-record collections."""
    name = collection.value if isinstance(collection, Collection) else collection
    return COLLECTION_SPECS[name]
