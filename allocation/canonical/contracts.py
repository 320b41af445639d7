from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# lease.type values as delivered by the property registry
HOUSING_CONTRACT_TYPE = "Bostadskontrakt"
PARKING_SPACE_CONTRACT_TYPE = "P-Platskontrakt"

# rental object type of a parking space ("bilplats")
PARKING_SPACE_PROPERTY_TYPE = "babps"

INTERNAL_PARKING_SPACE_WAITING_LIST = "Bilplats (intern)"


class RegistryModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ResidentialArea(RegistryModel):
    code: str
    caption: str | None = None


class EstateInfo(RegistryModel):
    estate_code: str
    type: str | None = None


class Contact(RegistryModel):
    contact_code: str
    name: str | None = None
    national_registration_number: str | None = None
    address: str | None = None
    is_tenant: bool = False


class WaitingList(RegistryModel):
    waiting_list_type_caption: str
    queue_points: int = Field(default=0, ge=0)


class Lease(RegistryModel):
    """
    A contract for a dwelling or a parking space.
    residential_area, estate_code and property_type are resolved by the
    directory lookups before any rule is evaluated against the lease.
    """
    lease_id: str
    rental_property_id: str
    type: str = ""
    lease_start_date: datetime
    last_debit_date: datetime | None = None
    termination_date: datetime | None = None

    residential_area: ResidentialArea | None = None
    estate_code: str | None = None
    property_type: str | None = None

    @property
    def residential_area_code(self) -> str | None:
        return self.residential_area.code if self.residential_area else None

    def is_housing_contract(self) -> bool:
        # registry values sometimes carry trailing whitespace
        return HOUSING_CONTRACT_TYPE in self.type

    def is_parking_space(self) -> bool:
        return self.property_type == PARKING_SPACE_PROPERTY_TYPE
