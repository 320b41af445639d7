from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from allocation.canonical.statuses import ListingStatus


class ListingCreate(BaseModel):
    rental_object_code: str = Field(min_length=1, max_length=50)
    address: str | None = None
    monthly_rent: float | None = Field(default=None, ge=0)
    district_code: str | None = None
    district_caption: str | None = None
    block_code: str | None = None
    block_caption: str | None = None
    status: ListingStatus = ListingStatus.Active
    published_from: datetime
    published_to: datetime
    vacant_from: datetime | None = None
    waiting_list_type: str | None = None
    rental_rule: str | None = None


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    rental_object_code: str
    address: str | None
    monthly_rent: float | None
    district_code: str | None
    district_caption: str | None
    block_code: str | None
    block_caption: str | None
    status: str
    published_from: datetime
    published_to: datetime
    vacant_from: datetime | None
    waiting_list_type: str | None
    rental_rule: str | None
