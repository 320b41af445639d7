from datetime import datetime

from pydantic import BaseModel, ConfigDict

from allocation.canonical.applicant import DetailedApplicant
from allocation.canonical.contracts import Lease


class ApplicationCreate(BaseModel):
    contact_code: str
    application_date: datetime | None = None


class WithdrawRequest(BaseModel):
    contact_code: str | None = None
    by_admin: bool = False


class ApplicantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    listing_id: int
    contact_code: str
    name: str | None
    national_registration_number: str | None
    application_date: datetime
    application_type: str | None
    status: str


class RankedApplicantOut(BaseModel):
    id: int
    contact_code: str
    name: str | None = None
    address: str | None = None
    application_date: datetime
    application_type: str | None = None
    status: str
    queue_points: int
    priority: int | None = None
    current_housing_contract: Lease | None = None
    upcoming_housing_contract: Lease | None = None
    parking_space_contracts: list[Lease] = []

    @classmethod
    def from_detailed(cls, a: DetailedApplicant) -> "RankedApplicantOut":
        return cls(
            id=a.id,
            contact_code=a.contact_code,
            name=a.name,
            address=a.address,
            application_date=a.application_date,
            application_type=a.application_type.value if a.application_type else None,
            status=a.status.value,
            queue_points=a.queue_points,
            priority=a.priority,
            current_housing_contract=a.current_housing_contract,
            upcoming_housing_contract=a.upcoming_housing_contract,
            parking_space_contracts=list(a.parking_space_contracts),
        )


class ApplicationTypeOut(BaseModel):
    eligible: bool
    application_type: str | None
    reason: str
    rule: str
