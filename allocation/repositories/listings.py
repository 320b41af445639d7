from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from allocation.canonical.statuses import ListingStatus
from allocation.core.errors import ErrorKind
from allocation.core.result import Result
from allocation.models.applicant import Applicant
from allocation.models.listing import Listing

log = logging.getLogger(__name__)


async def create_listing(
    db: AsyncSession,
    *,
    rental_object_code: str,
    published_from: datetime,
    published_to: datetime,
    status: str = ListingStatus.Active.value,
    address: str | None = None,
    monthly_rent: float | None = None,
    district_code: str | None = None,
    district_caption: str | None = None,
    block_code: str | None = None,
    block_caption: str | None = None,
    vacant_from: datetime | None = None,
    waiting_list_type: str | None = None,
    rental_rule: str | None = None,
) -> Result[Listing, str]:
    """
    Insert a listing. Returns 'conflict' when another Active listing exists
    for the same rental object (partial unique index).
    """
    listing = Listing(
        rental_object_code=rental_object_code,
        address=address,
        monthly_rent=monthly_rent,
        district_code=district_code,
        district_caption=district_caption,
        block_code=block_code,
        block_caption=block_caption,
        status=status,
        published_from=published_from,
        published_to=published_to,
        vacant_from=vacant_from,
        waiting_list_type=waiting_list_type,
        rental_rule=rental_rule,
    )
    try:
        # savepoint so a constraint hit does not poison the caller's transaction
        async with db.begin_nested():
            db.add(listing)
    except IntegrityError:
        log.info("listing for %s already active", rental_object_code)
        return Result.failure(ErrorKind.Conflict.value)
    except SQLAlchemyError:
        log.exception("create_listing failed for %s", rental_object_code)
        return Result.failure(ErrorKind.Unknown.value)

    # load server-side timestamps
    await db.refresh(listing)
    return Result.success(listing)


async def get_listing_by_id(db: AsyncSession, listing_id: int) -> Listing | None:
    stmt = select(Listing).where(Listing.id == listing_id).execution_options(populate_existing=True)
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_active_listing_by_rental_object_code(db: AsyncSession, rental_object_code: str) -> Listing | None:
    stmt = (
        select(Listing)
        .where(Listing.rental_object_code == rental_object_code, Listing.status == ListingStatus.Active.value)
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def update_listing_statuses(
    db: AsyncSession,
    listing_ids: Sequence[int],
    status: ListingStatus,
) -> Result[None, str]:
    try:
        result = await db.execute(
            update(Listing)
            .where(Listing.id.in_(list(listing_ids)))
            .values(status=status.value)
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError:
        log.exception("update_listing_statuses failed for %s -> %s", list(listing_ids), status.value)
        return Result.failure(ErrorKind.Unknown.value)

    if not result.rowcount:
        return Result.failure(ErrorKind.NoUpdate.value)
    return Result.success(None)


async def get_expired_listing_ids(db: AsyncSession, now: datetime) -> list[int]:
    stmt = select(Listing.id).where(
        Listing.status == ListingStatus.Active.value,
        Listing.published_to < now,
    ).order_by(Listing.id.asc())
    return list((await db.execute(stmt)).scalars().all())


async def delete_listing(db: AsyncSession, listing_id: int) -> Result[None, str]:
    """Listings referenced by applicants are kept."""
    listing = await get_listing_by_id(db, listing_id)
    if listing is None:
        return Result.failure(ErrorKind.NotFound.value)

    has_applicants = (
        await db.execute(select(exists().where(Applicant.listing_id == listing_id)))
    ).scalar()
    if has_applicants:
        return Result.failure(ErrorKind.Conflict.value)

    try:
        await db.delete(listing)
        await db.flush()
    except SQLAlchemyError:
        log.exception("delete_listing failed for %s", listing_id)
        return Result.failure(ErrorKind.Unknown.value)
    return Result.success(None)
