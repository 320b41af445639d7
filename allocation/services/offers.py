"""
Offer lifecycle: Active -> Accepted | Declined | Expired.

Accept and deny move listing, applicant and offer together through the
transaction coordinator; either every row changes or none does.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Sequence

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from allocation.canonical.applicant import DetailedApplicant
from allocation.canonical.offer import OfferSnapshot
from allocation.canonical.statuses import ApplicantStatus, ListingStatus, OfferStatus
from allocation.core.config import settings
from allocation.core.errors import ErrorKind, InvariantViolationError
from allocation.core.result import Result
from allocation.models.offer import Offer
from allocation.repositories import applicants as applicants_repo
from allocation.repositories import listings as listings_repo
from allocation.repositories import offers as offers_repo
from allocation.services import audit as audit_service
from allocation.services.transactions import StepName, TransactionStep, run_in_transaction

log = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def create_offer(
    db: AsyncSession,
    *,
    listing_id: int,
    applicant_id: int,
    ranked_applicants: Sequence[DetailedApplicant],
    expires_at: datetime | None = None,
    now: datetime | None = None,
) -> Result[Offer, str]:
    """
    Persist an Active offer of the listing to one applicant, freezing the
    ranked list as it stands. Listing and applicant statuses are untouched.
    """
    applicant = await applicants_repo.get_applicant_by_id(db, applicant_id)
    if applicant is None:
        return Result.failure(ErrorKind.NotFound.value)
    if applicant.listing_id != listing_id:
        raise InvariantViolationError(f"applicant {applicant_id} does not belong to listing {listing_id}")
    if applicant.status != ApplicantStatus.Active.value:
        log.info("applicant %s is %s, not offering listing %s", applicant_id, applicant.status, listing_id)
        return Result.failure(ErrorKind.InvalidState.value)

    existing = await offers_repo.get_offers_by_listing_id(db, listing_id)
    if any(o.status == OfferStatus.Active.value for o in existing):
        log.info("listing %s already has an active offer", listing_id)
        return Result.failure(ErrorKind.Conflict.value)

    now = now or _utcnow()
    offer = await offers_repo.create_offer(
        db,
        listing_id=listing_id,
        applicant_id=applicant_id,
        snapshot=OfferSnapshot.capture(ranked_applicants),
        expires_at=expires_at or now + timedelta(days=settings.offer_ttl_days),
    )
    log.info("offer #%d created for listing %s (applicant %s)", len(existing) + 1, listing_id, applicant_id)
    return Result.success(offer)


async def _load_active_offer(db: AsyncSession, offer_id: int) -> Result[Offer, str]:
    res = await offers_repo.get_offer_by_id(db, offer_id)
    if not res.ok:
        return res
    if res.data.status != OfferStatus.Active.value:
        log.info("offer %s is %s, refusing transition", offer_id, res.data.status)
        return Result.failure(ErrorKind.InvalidState.value)
    return res


async def accept_offer(
    db: AsyncSession,
    *,
    listing_id: int,
    applicant_id: int,
    offer_id: int,
    now: datetime | None = None,
) -> Result[None, str]:
    loaded = await _load_active_offer(db, offer_id)
    if not loaded.ok:
        return Result.failure(loaded.err)

    offer = loaded.data
    if offer.listing_id != listing_id or offer.applicant_id != applicant_id:
        raise InvariantViolationError(
            f"offer {offer_id} is for listing {offer.listing_id} / applicant {offer.applicant_id}"
        )

    answered_at = now or _utcnow()
    steps = [
        TransactionStep(
            StepName.UpdateListing,
            lambda tx: listings_repo.update_listing_statuses(tx, [listing_id], ListingStatus.Assigned),
        ),
        TransactionStep(
            StepName.UpdateApplicant,
            lambda tx: applicants_repo.update_applicant_status(tx, applicant_id, ApplicantStatus.OfferAccepted),
        ),
        TransactionStep(
            StepName.UpdateOffer,
            lambda tx: offers_repo.update_offer_answered_status(tx, offer_id, OfferStatus.Accepted, answered_at),
        ),
        TransactionStep(
            StepName.WriteAudit,
            lambda tx: audit_service.audit(
                tx,
                action="offer.accepted",
                target_type="offer",
                target_id=str(offer_id),
                detail={"listing_id": listing_id, "applicant_id": applicant_id},
            ),
        ),
    ]

    with tracer.start_as_current_span("offer.accept") as span:
        span.set_attribute("offer.id", offer_id)
        result = await run_in_transaction(
            db, steps, context={"offer_id": offer_id, "listing_id": listing_id, "applicant_id": applicant_id}
        )
        span.set_attribute("offer.result", "ok" if result.ok else str(result.err))

    if result.ok:
        log.info("offer %s accepted by applicant %s", offer_id, applicant_id)
    return result


async def deny_offer(
    db: AsyncSession,
    *,
    applicant_id: int,
    offer_id: int,
    now: datetime | None = None,
) -> Result[None, str]:
    """The listing is left as is; it goes back to the next applicant in line."""
    loaded = await _load_active_offer(db, offer_id)
    if not loaded.ok:
        return Result.failure(loaded.err)

    offer = loaded.data
    if offer.applicant_id != applicant_id:
        raise InvariantViolationError(f"offer {offer_id} was not made to applicant {applicant_id}")

    answered_at = now or _utcnow()
    steps = [
        TransactionStep(
            StepName.UpdateApplicant,
            lambda tx: applicants_repo.update_applicant_status(tx, applicant_id, ApplicantStatus.OfferDeclined),
        ),
        TransactionStep(
            StepName.UpdateOffer,
            lambda tx: offers_repo.update_offer_answered_status(tx, offer_id, OfferStatus.Declined, answered_at),
        ),
        TransactionStep(
            StepName.WriteAudit,
            lambda tx: audit_service.audit(
                tx,
                action="offer.declined",
                target_type="offer",
                target_id=str(offer_id),
                detail={"listing_id": offer.listing_id, "applicant_id": applicant_id},
            ),
        ),
    ]

    with tracer.start_as_current_span("offer.deny") as span:
        span.set_attribute("offer.id", offer_id)
        result = await run_in_transaction(db, steps, context={"offer_id": offer_id, "applicant_id": applicant_id})
        span.set_attribute("offer.result", "ok" if result.ok else str(result.err))

    if result.ok:
        log.info("offer %s declined by applicant %s", offer_id, applicant_id)
    return result


async def mark_offer_sent(db: AsyncSession, *, offer_id: int, sent_at: datetime) -> Result[None, str]:
    res = await offers_repo.update_offer_sent_at(db, offer_id, sent_at)
    if not res.ok and res.err == ErrorKind.NoUpdate.value:
        return Result.failure(ErrorKind.NotFound.value)
    return res


async def expire_offers(db: AsyncSession, *, now: datetime | None = None) -> list[int]:
    """
    Move Active offers past their expiry to Expired and mark the offered
    applicants OfferExpired. Returns the ids of the affected listings.
    """
    now = now or _utcnow()
    expired = await offers_repo.get_expired_active_offers(db, now)
    if not expired:
        return []

    await offers_repo.mark_offers_expired(db, [o.id for o in expired])
    for offer in expired:
        res = await applicants_repo.update_applicant_status(db, offer.applicant_id, ApplicantStatus.OfferExpired)
        if not res.ok:
            log.warning("expire_offers: applicant %s not updated (%s)", offer.applicant_id, res.err)

    listing_ids = sorted({o.listing_id for o in expired})
    log.info("expired %d offers on listings %s", len(expired), listing_ids)
    return listing_ids
