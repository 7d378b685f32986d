"""Read-only figures derived from a synced record list."""

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from monteerly.models import Record


@dataclass(frozen=True)
class Aggregates:
    total: int
    by_status: Mapping[str, int]
    total_budget: float

    def count(self, *statuses: str | Enum) -> int:
        """Number of records in any of the given statuses."""
        return sum(
            self.by_status.get(s.value if isinstance(s, Enum) else s, 0) for s in statuses
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_status": dict(self.by_status),
            "total_budget": self.total_budget,
        }


def compute_aggregates(records: Iterable[Record], statuses: type[Enum]) -> Aggregates:
    """Counts per status (every status listed, zeros included) and the budget sum."""
    records = list(records)
    counts = Counter(r.status.value for r in records)  # type: ignore[attr-defined]
    return Aggregates(
        total=len(records),
        by_status={s.value: counts.get(s.value, 0) for s in statuses},
        total_budget=sum((r.budget for r in records), 0.0),
    )


def empty_aggregates(statuses: type[Enum]) -> Aggregates:
    return compute_aggregates((), statuses)
