from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from allocation.canonical.statuses import TERMINAL_APPLICANT_STATUSES, ApplicantStatus, ListingStatus
from allocation.core.errors import DirectoryError, ErrorKind
from allocation.core.result import Result
from allocation.models.applicant import Applicant
from allocation.repositories import applicants as applicants_repo
from allocation.repositories import listings as listings_repo
from allocation.services import applicant_details
from allocation.services.directory import PropertyDirectory
from allocation.services.listings import listing_view
from allocation.services.rental_rules import RentalRuleEngine, RuleOutcome

log = logging.getLogger(__name__)


async def determine_application_type(
    db: AsyncSession,
    engine: RentalRuleEngine,
    directory: PropertyDirectory,
    *,
    contact_code: str,
    rental_object_code: str,
) -> Result[RuleOutcome, str]:
    """
    The application type the contact would get for the active listing of the
    rental object. Ineligibility is a successful outcome with eligible=False.
    """
    listing = await listings_repo.get_active_listing_by_rental_object_code(db, rental_object_code)
    if listing is None:
        return Result.failure(ErrorKind.NotFound.value)

    tenant = await applicant_details.get_tenant(contact_code, directory)
    if not tenant.ok:
        return Result.failure(tenant.err)

    try:
        view = await listing_view(listing, directory)
    except DirectoryError:
        return Result.failure("get-estate-code")

    outcome = engine.evaluate(view, tenant.data)
    log.info(
        "application type for %s on %s: eligible=%s type=%s (%s)",
        contact_code, rental_object_code, outcome.eligible, outcome.application_type, outcome.rule.value,
    )
    return Result.success(outcome)


async def apply_for_listing(
    db: AsyncSession,
    engine: RentalRuleEngine,
    directory: PropertyDirectory,
    *,
    listing_id: int,
    contact_code: str,
    application_date: datetime | None = None,
) -> Result[Applicant, str]:
    listing = await listings_repo.get_listing_by_id(db, listing_id)
    if listing is None:
        return Result.failure(ErrorKind.NotFound.value)
    if listing.status != ListingStatus.Active.value:
        return Result.failure("listing-not-active")
    if await applicants_repo.application_exists(db, contact_code, listing_id):
        return Result.failure("already-applied")

    tenant = await applicant_details.get_tenant(contact_code, directory)
    if not tenant.ok:
        return Result.failure(tenant.err)

    try:
        view = await listing_view(listing, directory)
    except DirectoryError:
        return Result.failure("get-estate-code")

    outcome = engine.evaluate(view, tenant.data)
    if not outcome.eligible:
        log.info("contact %s not eligible for listing %s: %s", contact_code, listing_id, outcome.reason.value)
        return Result.failure(ErrorKind.Ineligible.value)

    res = await applicants_repo.create_application(
        db,
        listing_id=listing_id,
        contact_code=contact_code,
        name=tenant.data.name,
        national_registration_number=tenant.data.national_registration_number,
        application_type=outcome.application_type,
        application_date=application_date,
    )
    if not res.ok and res.err == ErrorKind.Conflict.value:
        return Result.failure("already-applied")
    return res


async def withdraw_application(
    db: AsyncSession,
    *,
    applicant_id: int,
    contact_code: str | None = None,
    by_admin: bool = False,
) -> Result[None, str]:
    applicant = await applicants_repo.get_applicant_by_id(db, applicant_id)
    # a contact only sees its own applications
    if applicant is None or (not by_admin and applicant.contact_code != contact_code):
        return Result.failure(ErrorKind.NotFound.value)
    if applicant.status in TERMINAL_APPLICANT_STATUSES:
        return Result.failure(ErrorKind.InvalidState.value)

    status = ApplicantStatus.WithdrawnByAdmin if by_admin else ApplicantStatus.WithdrawnByUser
    res = await applicants_repo.update_applicant_status(db, applicant_id, status)
    if not res.ok and res.err == ErrorKind.NoUpdate.value:
        # became terminal concurrently
        return Result.failure(ErrorKind.InvalidState.value)
    if res.ok:
        log.info("applicant %s -> %s", applicant_id, status.value)
    return res
