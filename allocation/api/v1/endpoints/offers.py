from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from allocation.api.deps import get_directory, get_rule_engine
from allocation.api.errors import raise_for_error
from allocation.core.db import get_db
from allocation.repositories import offers as offers_repo
from allocation.schemas.offer import OfferAccept, OfferCreate, OfferDeny, OfferOut, OfferSentAt
from allocation.services import listings as listing_service
from allocation.services import offers as offer_service
from allocation.services.directory import PropertyDirectory
from allocation.services.rental_rules import RentalRuleEngine

router = APIRouter()


@router.post("/offers", response_model=OfferOut, status_code=201)
async def create_offer(
    payload: OfferCreate,
    db: AsyncSession = Depends(get_db),
    engine: RentalRuleEngine = Depends(get_rule_engine),
    directory: PropertyDirectory = Depends(get_directory),
) -> OfferOut:
    ranked = await listing_service.get_ranked_applicants_for_listing(
        db, engine, directory, listing_id=payload.listing_id
    )
    if not ranked.ok:
        raise_for_error(ranked.err)

    res = await offer_service.create_offer(
        db,
        listing_id=payload.listing_id,
        applicant_id=payload.applicant_id,
        ranked_applicants=ranked.data,
        expires_at=payload.expires_at,
    )
    if not res.ok:
        raise_for_error(res.err)

    await db.commit()
    return OfferOut.from_offer(res.data)


@router.get("/offers/{offer_id}", response_model=OfferOut)
async def get_offer(offer_id: int, db: AsyncSession = Depends(get_db)) -> OfferOut:
    res = await offers_repo.get_offer_by_id(db, offer_id)
    if not res.ok:
        raise_for_error(res.err)
    return OfferOut.from_offer(res.data)


@router.put("/offers/{offer_id}/accept", status_code=204)
async def accept_offer(offer_id: int, payload: OfferAccept, db: AsyncSession = Depends(get_db)) -> None:
    res = await offer_service.accept_offer(
        db, listing_id=payload.listing_id, applicant_id=payload.applicant_id, offer_id=offer_id
    )
    if not res.ok:
        raise_for_error(res.err)
    await db.commit()


@router.put("/offers/{offer_id}/deny", status_code=204)
async def deny_offer(offer_id: int, payload: OfferDeny, db: AsyncSession = Depends(get_db)) -> None:
    res = await offer_service.deny_offer(db, applicant_id=payload.applicant_id, offer_id=offer_id)
    if not res.ok:
        raise_for_error(res.err)
    await db.commit()


@router.put("/offers/{offer_id}/sent-at", status_code=204)
async def mark_offer_sent(offer_id: int, payload: OfferSentAt, db: AsyncSession = Depends(get_db)) -> None:
    res = await offer_service.mark_offer_sent(db, offer_id=offer_id, sent_at=payload.sent_at)
    if not res.ok:
        raise_for_error(res.err)
    await db.commit()
