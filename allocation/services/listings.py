from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from allocation.canonical.applicant import DetailedApplicant, ListingView
from allocation.canonical.statuses import ApplicantStatus, ListingStatus
from allocation.core.errors import DirectoryError, ErrorKind
from allocation.core.result import Result
from allocation.models.listing import Listing
from allocation.repositories import applicants as applicants_repo
from allocation.repositories import listings as listings_repo
from allocation.services import applicant_details
from allocation.services.directory import PropertyDirectory
from allocation.services.ranking import rank_applicants
from allocation.services.rental_rules import RentalRuleEngine

log = logging.getLogger(__name__)


async def create_listing(db: AsyncSession, **fields: Any) -> Result[Listing, str]:
    res = await listings_repo.create_listing(db, **fields)
    if res.ok:
        log.info("listing %s created for %s", res.data.id, res.data.rental_object_code)
    return res


async def expire_listings(db: AsyncSession, *, now: datetime | None = None) -> list[int]:
    """Move Active listings whose publish window has closed to Expired."""
    now = now or datetime.now(timezone.utc)
    listing_ids = await listings_repo.get_expired_listing_ids(db, now)
    if not listing_ids:
        return []

    res = await listings_repo.update_listing_statuses(db, listing_ids, ListingStatus.Expired)
    if not res.ok:
        log.warning("expire_listings: %s for %s", res.err, listing_ids)
        return []
    log.info("expired listings %s", listing_ids)
    return listing_ids


async def listing_view(listing: Listing, directory: PropertyDirectory) -> ListingView:
    """Raises DirectoryError when the estate code cannot be resolved."""
    estate = await directory.resolve_estate_code(listing.rental_object_code)
    return ListingView(
        id=listing.id,
        rental_object_code=listing.rental_object_code,
        district_code=listing.district_code,
        estate_code=estate.estate_code if estate else None,
        status=ListingStatus(listing.status),
    )


async def get_ranked_applicants_for_listing(
    db: AsyncSession,
    engine: RentalRuleEngine,
    directory: PropertyDirectory,
    *,
    listing_id: int,
    now: datetime | None = None,
) -> Result[list[DetailedApplicant], str]:
    """
    Active applicants of the listing, enriched from the registry, prioritized
    and ranked. Applicants stored without an application type get the one the
    rental rules would give them today; applicants the rules find ineligible
    are left without priority.
    """
    listing = await listings_repo.get_listing_by_id(db, listing_id)
    if listing is None:
        return Result.failure(ErrorKind.NotFound.value)

    try:
        view = await listing_view(listing, directory)
    except DirectoryError:
        return Result.failure("get-estate-code")

    applicants = await applicants_repo.get_applicants_by_listing_id(db, listing_id, status=ApplicantStatus.Active)
    details = await asyncio.gather(
        *(applicant_details.get_detailed_applicant(a, directory, now=now) for a in applicants)
    )

    detailed: list[DetailedApplicant] = []
    for applicant, res in zip(applicants, details):
        if not res.ok:
            log.warning("applicant %s on listing %s: %s", applicant.id, listing_id, res.err)
            return Result.failure(res.err)
        d = res.data
        if d.application_type is None:
            outcome = engine.evaluate(view, d)
            if outcome.eligible:
                d = d.model_copy(update={"application_type": outcome.application_type})
        detailed.append(d)

    return Result.success(rank_applicants(view, detailed, engine))
