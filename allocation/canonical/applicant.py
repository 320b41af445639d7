from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from allocation.canonical.contracts import Lease
from allocation.canonical.housing import HousingStatus, housing_status_of
from allocation.canonical.statuses import ApplicantStatus, ApplicationType, ListingStatus


class ListingView(BaseModel):
    """Transient view of a listing as the rule layer needs it."""
    model_config = ConfigDict(frozen=True)

    id: int
    rental_object_code: str
    district_code: str | None = None
    estate_code: str | None = None
    status: ListingStatus = ListingStatus.Active


class Tenant(BaseModel):
    """A contact together with the contracts the rules are evaluated against."""
    model_config = ConfigDict(frozen=True)

    contact_code: str
    name: str | None = None
    national_registration_number: str | None = None
    address: str | None = None
    queue_points: int = Field(default=0, ge=0)

    current_housing_contract: Lease | None = None
    upcoming_housing_contract: Lease | None = None
    parking_space_contracts: tuple[Lease, ...] = ()

    @property
    def housing_status(self) -> HousingStatus:
        return housing_status_of(self.current_housing_contract, self.upcoming_housing_contract)


class DetailedApplicant(Tenant):
    id: int
    listing_id: int
    application_date: datetime
    application_type: ApplicationType | None = None
    status: ApplicantStatus = ApplicantStatus.Active

    # 1 (best) to 3; None when the applicant is not entitled to the listing
    priority: int | None = None
