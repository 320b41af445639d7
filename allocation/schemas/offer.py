from datetime import datetime

from pydantic import BaseModel

from allocation.canonical.offer import SnapshotEntry
from allocation.models.offer import Offer


class OfferCreate(BaseModel):
    listing_id: int
    applicant_id: int
    expires_at: datetime | None = None


class OfferAccept(BaseModel):
    listing_id: int
    applicant_id: int


class OfferDeny(BaseModel):
    applicant_id: int


class OfferSentAt(BaseModel):
    sent_at: datetime


class OfferOut(BaseModel):
    id: int
    listing_id: int
    applicant_id: int
    status: str
    expires_at: datetime
    sent_at: datetime | None
    answered_at: datetime | None
    created_at: datetime
    selected_applicants: list[SnapshotEntry]

    @classmethod
    def from_offer(cls, offer: Offer) -> "OfferOut":
        return cls(
            id=offer.id,
            listing_id=offer.listing_id,
            applicant_id=offer.applicant_id,
            status=offer.status,
            expires_at=offer.expires_at,
            sent_at=offer.sent_at,
            answered_at=offer.answered_at,
            created_at=offer.created_at,
            selected_applicants=list(offer.selected_applicants.entries),
        )
