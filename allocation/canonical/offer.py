from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict

from allocation.canonical.applicant import DetailedApplicant
from allocation.canonical.statuses import ApplicationType


class SnapshotEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    applicant_id: int
    contact_code: str
    application_type: ApplicationType | None = None
    queue_points: int
    priority: int | None = None
    has_parking_space: bool = False
    address: str | None = None
    sort_order: int


@dataclass(frozen=True)
class OfferSnapshot:
    """
    The ranked applicant list as it stood when an offer was made.
    Captured once; later re-ranking never touches it.
    """
    entries: tuple[SnapshotEntry, ...]

    @classmethod
    def capture(cls, ranked: Sequence[DetailedApplicant]) -> "OfferSnapshot":
        return cls(entries=tuple(
            SnapshotEntry(
                applicant_id=a.id,
                contact_code=a.contact_code,
                application_type=a.application_type,
                queue_points=a.queue_points,
                priority=a.priority,
                has_parking_space=bool(a.parking_space_contracts),
                address=a.address,
                sort_order=i,
            )
            for i, a in enumerate(ranked)
        ))

    @classmethod
    def from_json(cls, rows: list[dict[str, Any]] | None) -> "OfferSnapshot":
        return cls(entries=tuple(SnapshotEntry.model_validate(r) for r in (rows or [])))

    def to_json(self) -> list[dict[str, Any]]:
        return [e.model_dump(mode="json") for e in self.entries]

    def applicant_ids(self) -> list[int]:
        return [e.applicant_id for e in self.entries]
