from datetime import datetime

from sqlalchemy import Index, Integer, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from allocation.canonical.statuses import ListingStatus
from allocation.models.base import Base, TimestampMixin


class Listing(TimestampMixin, Base):
    __tablename__ = "listings"
    __table_args__ = (
        # at most one Active listing per rental object
        Index(
            "uq_listings_active_rental_object_code",
            "rental_object_code",
            unique=True,
            postgresql_where=text("status = 'Active'"),
            sqlite_where=text("status = 'Active'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # business identifier of the vacant unit in the property registry
    rental_object_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    address: Mapped[str | None] = mapped_column(String(200), nullable=True)
    monthly_rent: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)

    district_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    district_caption: Mapped[str | None] = mapped_column(String(120), nullable=True)
    block_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    block_caption: Mapped[str | None] = mapped_column(String(120), nullable=True)

    # "Active" | "Assigned" | "Expired" | "Closed"
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=ListingStatus.Active.value)

    published_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    published_to: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    vacant_from: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    waiting_list_type: Mapped[str | None] = mapped_column(String(60), nullable=True)
    rental_rule: Mapped[str | None] = mapped_column(String(60), nullable=True)
