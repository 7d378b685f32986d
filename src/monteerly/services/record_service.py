"""Shared owner-scoped operations for record collections."""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from monteerly.core.exceptions import NotFound, ValidationError
from monteerly.core.logging import get_logger
from monteerly.models import Record
from monteerly.services.transition_service import StatusTransitionController, status_value
from monteerly.store import OWNER_FIELD, DocumentStore, FieldFilter, OrderBy, Query
from monteerly.sync.engine import SyncView, reconcile
from monteerly.sync.materialize import CollectionSpec

logger = get_logger(__name__)


def validate_fields[S: BaseModel](schema: type[S], data: Mapping[str, Any] | S) -> S:
    """Validate submitted fields, raising the studio's ValidationError.

    Errors are keyed by field name so a form can show them next to the input.
    """
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        errors: dict[str, str] = {}
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]) or "__root__"
            errors.setdefault(field, str(error["msg"]).removeprefix("Value error, "))
        raise ValidationError(errors) from e


class RecordService[R: Record]:
    """Reads and status changes for one owner's records of one collection."""

    spec: CollectionSpec[R]

    def __init__(
        self, store: DocumentStore, transitions: StatusTransitionController | None = None
    ):
        self.store = store
        self.transitions = transitions or StatusTransitionController(store)

    @property
    def collection(self) -> str:
        return self.spec.name

    async def get(self, owner_id: str, record_id: str) -> R:
        """Load one record. Records of other owners are reported as missing."""
        raw = await self.store.get(self.collection, record_id)
        record = self.spec.materialize(record_id, raw, None)
        if record.owner_id != owner_id:
            raise NotFound(self.collection, record_id)
        return record

    async def view(self, owner_id: str, filters: Iterable[FieldFilter] = ()) -> SyncView:
        """One-shot read of the owner's records, ordered and summarized."""
        query = Query(collection=self.collection, order_by=OrderBy()).where(
            OWNER_FIELD, owner_id
        )
        documents = await self.store.query(query)
        return reconcile(self.spec, documents, owner_fallback=owner_id, filters=filters)

    async def list_records(self, owner_id: str, status: str | Enum | None = None) -> list[R]:
        filters = () if status is None else (FieldFilter("status", status_value(status)),)
        return list((await self.view(owner_id, filters)).records)  # type: ignore[arg-type]

    async def transition(self, owner_id: str, record_id: str, status: str | Enum) -> R:
        """Move a record to `status` and return it as it now reads."""
        record = await self.get(owner_id, record_id)
        await self.transitions.transition(record, status)
        target = self.spec.statuses(status_value(status))
        return record.model_copy(update={"status": target})
