from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from allocation.canonical.offer import OfferSnapshot
from allocation.canonical.statuses import OfferStatus
from allocation.core.errors import ErrorKind
from allocation.core.result import Result
from allocation.models.offer import Offer

log = logging.getLogger(__name__)


async def create_offer(
    db: AsyncSession,
    *,
    listing_id: int,
    applicant_id: int,
    snapshot: OfferSnapshot,
    expires_at: datetime,
) -> Offer:
    offer = Offer(
        listing_id=listing_id,
        applicant_id=applicant_id,
        status=OfferStatus.Active.value,
        selection_snapshot=snapshot.to_json(),
        expires_at=expires_at,
    )
    db.add(offer)
    await db.flush()
    await db.refresh(offer)
    return offer


async def get_offer_by_id(db: AsyncSession, offer_id: int) -> Result[Offer, str]:
    try:
        stmt = select(Offer).where(Offer.id == offer_id).execution_options(populate_existing=True)
        offer = (await db.execute(stmt)).scalar_one_or_none()
    except SQLAlchemyError:
        log.exception("get_offer_by_id failed for %s", offer_id)
        return Result.failure(ErrorKind.Unknown.value)

    if offer is None:
        return Result.failure(ErrorKind.NotFound.value)
    return Result.success(offer)


async def get_offers_by_listing_id(db: AsyncSession, listing_id: int) -> list[Offer]:
    stmt = (
        select(Offer)
        .where(Offer.listing_id == listing_id)
        .order_by(Offer.id.asc())
        .execution_options(populate_existing=True)
    )
    return list((await db.execute(stmt)).scalars().all())


async def update_offer_answered_status(
    db: AsyncSession,
    offer_id: int,
    status: OfferStatus,
    answered_at: datetime,
) -> Result[None, str]:
    """Only an Active offer can be answered; anything else is 'no-update'."""
    try:
        result = await db.execute(
            update(Offer)
            .where(Offer.id == offer_id, Offer.status == OfferStatus.Active.value)
            .values(status=status.value, answered_at=answered_at)
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError:
        log.exception("update_offer_answered_status failed for %s -> %s", offer_id, status.value)
        return Result.failure(ErrorKind.Unknown.value)

    if not result.rowcount:
        return Result.failure(ErrorKind.NoUpdate.value)
    return Result.success(None)


async def update_offer_sent_at(db: AsyncSession, offer_id: int, sent_at: datetime) -> Result[None, str]:
    try:
        result = await db.execute(
            update(Offer)
            .where(Offer.id == offer_id)
            .values(sent_at=sent_at)
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError:
        log.exception("update_offer_sent_at failed for %s", offer_id)
        return Result.failure(ErrorKind.Unknown.value)

    if not result.rowcount:
        return Result.failure(ErrorKind.NoUpdate.value)
    return Result.success(None)


async def get_expired_active_offers(db: AsyncSession, now: datetime) -> list[Offer]:
    stmt = (
        select(Offer)
        .where(Offer.status == OfferStatus.Active.value, Offer.expires_at < now)
        .order_by(Offer.id.asc())
        .execution_options(populate_existing=True)
    )
    return list((await db.execute(stmt)).scalars().all())


async def mark_offers_expired(db: AsyncSession, offer_ids: Sequence[int]) -> int:
    result = await db.execute(
        update(Offer)
        .where(Offer.id.in_(list(offer_ids)), Offer.status == OfferStatus.Active.value)
        .values(status=OfferStatus.Expired.value)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)
