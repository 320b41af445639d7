from datetime import datetime

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from allocation.canonical.statuses import ApplicantStatus
from allocation.models.base import Base, TimestampMixin


class Applicant(TimestampMixin, Base):
    __tablename__ = "applicants"
    __table_args__ = (
        # a contact applies at most once per listing
        UniqueConstraint("contact_code", "listing_id", name="uq_applicant_contact_listing"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    contact_code: Mapped[str] = mapped_column(String(20), nullable=False)
    national_registration_number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    application_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    # "Additional" | "Replace"
    application_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=ApplicantStatus.Active.value)

    listing_id: Mapped[int] = mapped_column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
