"""
Assembles Tenant / DetailedApplicant views from the property registry.

All registry calls for one contact run concurrently; a registry failure is
reported as a tagged error naming the lookup that failed.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Sequence

from allocation.canonical.applicant import DetailedApplicant, Tenant
from allocation.canonical.contracts import INTERNAL_PARKING_SPACE_WAITING_LIST, Lease, WaitingList
from allocation.canonical.statuses import ApplicantStatus, ApplicationType
from allocation.core.errors import DirectoryError
from allocation.core.result import Result
from allocation.models.applicant import Applicant
from allocation.services.directory import PropertyDirectory

log = logging.getLogger(__name__)


def _as_utc(dt: datetime) -> datetime:
    # registry dates without offset are UTC
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def is_lease_active_or_upcoming(lease: Lease, *, now: datetime | None = None) -> bool:
    now = _as_utc(now or datetime.now(timezone.utc))
    if lease.last_debit_date and _as_utc(lease.last_debit_date) <= now:
        return False
    if lease.termination_date and _as_utc(lease.termination_date) <= now:
        return False
    return True


def parse_leases_for_housing_contracts(
    leases: Sequence[Lease],
    *,
    now: datetime | None = None,
) -> tuple[Lease | None, Lease | None] | None:
    """
    Returns (current, upcoming). A contact holds at most one current and one
    upcoming housing contract; None when no housing contract is found.
    """
    now = _as_utc(now or datetime.now(timezone.utc))
    housing = [lease for lease in leases if lease.is_housing_contract()]
    started = [lease for lease in housing if _as_utc(lease.lease_start_date) <= now]
    pending = [lease for lease in housing if _as_utc(lease.lease_start_date) > now]

    # a started lease with a last debit date is a home being moved out of
    open_ended = [lease for lease in started if lease.last_debit_date is None]
    if open_ended:
        current = open_ended[0]
    elif started:
        current = max(started, key=lambda lease: _as_utc(lease.lease_start_date))
    else:
        current = None
    upcoming = pending[0] if pending else None
    if current is None and upcoming is None:
        return None
    if len(started) > 1 or len(pending) > 1:
        log.warning("more than one current or upcoming housing contract: %s", [lease.lease_id for lease in housing])
    return current, upcoming


def parse_leases_for_parking_spaces(leases: Sequence[Lease]) -> list[Lease]:
    return [lease for lease in leases if lease.is_parking_space()]


def parse_waiting_list_for_internal_parking_space(waiting_lists: Sequence[WaitingList]) -> WaitingList | None:
    for wl in waiting_lists:
        if wl.waiting_list_type_caption == INTERNAL_PARKING_SPACE_WAITING_LIST:
            return wl
    return None


async def _with_residential_area(directory: PropertyDirectory, leases: Sequence[Lease]) -> list[Lease]:
    areas = await asyncio.gather(*(directory.resolve_residential_area(lease.rental_property_id) for lease in leases))
    return [lease.model_copy(update={"residential_area": area}) for lease, area in zip(leases, areas)]


async def _with_property_info(directory: PropertyDirectory, leases: Sequence[Lease]) -> list[Lease]:
    infos = await asyncio.gather(*(directory.resolve_estate_code(lease.rental_property_id) for lease in leases))
    return [
        lease.model_copy(update={
            "estate_code": info.estate_code if info else None,
            "property_type": info.type if info else None,
        })
        for lease, info in zip(leases, infos)
    ]


async def get_tenant(
    contact_code: str,
    directory: PropertyDirectory,
    *,
    require_tenant: bool = True,
    now: datetime | None = None,
) -> Result[Tenant, str]:
    try:
        contact = await directory.get_contact(contact_code)
    except DirectoryError:
        return Result.failure("get-contact")
    if contact is None:
        return Result.failure("contact-not-found")
    if require_tenant and not contact.is_tenant:
        return Result.failure("contact-not-tenant")

    try:
        waiting_lists, leases = await asyncio.gather(
            directory.get_waiting_lists(contact.national_registration_number or ""),
            directory.get_leases(contact.contact_code),
        )
    except DirectoryError as e:
        return Result.failure("get-waiting-lists" if e.operation == "get-waiting-lists" else "get-leases")

    waiting_list = parse_waiting_list_for_internal_parking_space(waiting_lists)
    if waiting_list is None:
        return Result.failure("waiting-list-not-found")

    active = [lease for lease in leases if is_lease_active_or_upcoming(lease, now=now)]
    try:
        active = await _with_residential_area(directory, active)
    except DirectoryError:
        log.warning("residential area lookup failed for contact %s", contact_code)
        return Result.failure("get-residential-area")

    housing = parse_leases_for_housing_contracts(active, now=now)
    if housing is None:
        return Result.failure("housing-contracts-not-found")

    try:
        active = await _with_property_info(directory, active)
    except DirectoryError:
        log.warning("estate code lookup failed for contact %s", contact_code)
        return Result.failure("get-lease-property-info")

    # housing contracts again, now carrying their estate codes
    current, upcoming = parse_leases_for_housing_contracts(active, now=now)

    return Result.success(Tenant(
        contact_code=contact.contact_code,
        name=contact.name,
        national_registration_number=contact.national_registration_number,
        address=contact.address,
        queue_points=waiting_list.queue_points,
        current_housing_contract=current,
        upcoming_housing_contract=upcoming,
        parking_space_contracts=tuple(parse_leases_for_parking_spaces(active)),
    ))


async def get_detailed_applicant(
    applicant: Applicant,
    directory: PropertyDirectory,
    *,
    now: datetime | None = None,
) -> Result[DetailedApplicant, str]:
    tenant = await get_tenant(applicant.contact_code, directory, require_tenant=False, now=now)
    if not tenant.ok:
        return Result.failure(tenant.err)

    return Result.success(DetailedApplicant(
        **{name: getattr(tenant.data, name) for name in Tenant.model_fields},
        id=applicant.id,
        listing_id=applicant.listing_id,
        application_date=applicant.application_date,
        application_type=ApplicationType(applicant.application_type) if applicant.application_type else None,
        status=ApplicantStatus(applicant.status),
    ))
