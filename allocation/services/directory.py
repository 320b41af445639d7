from __future__ import annotations

from typing import Protocol

from allocation.canonical.contracts import Contact, EstateInfo, Lease, ResidentialArea, WaitingList


# Lookups return None when the registry has no such record and raise
# DirectoryError when the registry could not answer.

class ContactDirectory(Protocol):
    async def get_contact(self, contact_code: str) -> Contact | None:
        ...

    async def get_waiting_lists(self, national_registration_number: str) -> list[WaitingList]:
        ...

    async def get_leases(self, contact_code: str) -> list[Lease]:
        ...


class EstateCodeLookup(Protocol):
    async def resolve_estate_code(self, rental_object_code: str) -> EstateInfo | None:
        ...


class ResidentialAreaLookup(Protocol):
    async def resolve_residential_area(self, rental_property_id: str) -> ResidentialArea | None:
        ...


class PropertyDirectory(ContactDirectory, EstateCodeLookup, ResidentialAreaLookup, Protocol):
    """Everything the allocation services read from the property registry."""
