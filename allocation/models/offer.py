from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from allocation.canonical.offer import OfferSnapshot
from allocation.canonical.statuses import OfferStatus
from allocation.models.base import Base, JSONType


class Offer(Base):
    __tablename__ = "offers"
    __table_args__ = (
        # expiry poller scan
        Index("ix_offers_status_expires_at", "status", "expires_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    listing_id: Mapped[int] = mapped_column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    applicant_id: Mapped[int] = mapped_column(Integer, ForeignKey("applicants.id"), nullable=False)

    # "Active" | "Accepted" | "Declined" | "Expired"
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=OfferStatus.Active.value)

    # ranked applicants at creation time, written once
    selection_snapshot: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    answered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def selected_applicants(self) -> OfferSnapshot:
        return OfferSnapshot.from_json(self.selection_snapshot)
