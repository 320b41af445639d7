from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from allocation.api.deps import get_directory, get_rule_engine
from allocation.api.errors import raise_for_error
from allocation.core.db import get_db
from allocation.repositories import listings as listings_repo
from allocation.schemas.applicant import RankedApplicantOut
from allocation.schemas.listing import ListingCreate, ListingOut
from allocation.services import listings as listing_service
from allocation.services.directory import PropertyDirectory
from allocation.services.rental_rules import RentalRuleEngine

router = APIRouter()


@router.post("/listings", response_model=ListingOut, status_code=201)
async def create_listing(payload: ListingCreate, db: AsyncSession = Depends(get_db)) -> ListingOut:
    fields = payload.model_dump()
    fields["status"] = payload.status.value
    res = await listing_service.create_listing(db, **fields)
    if not res.ok:
        raise_for_error(res.err)

    await db.commit()
    return ListingOut.model_validate(res.data)


@router.get("/listings/{listing_id}", response_model=ListingOut)
async def get_listing(listing_id: int, db: AsyncSession = Depends(get_db)) -> ListingOut:
    listing = await listings_repo.get_listing_by_id(db, listing_id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Listing not found")
    return ListingOut.model_validate(listing)


@router.delete("/listings/{listing_id}", status_code=204)
async def delete_listing(listing_id: int, db: AsyncSession = Depends(get_db)) -> None:
    res = await listings_repo.delete_listing(db, listing_id)
    if not res.ok:
        raise_for_error(res.err)
    await db.commit()


@router.get(
    "/listings/{listing_id}/applicants/ranked",
    response_model=list[RankedApplicantOut],
    response_model_by_alias=False,
)
async def get_ranked_applicants(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
    engine: RentalRuleEngine = Depends(get_rule_engine),
    directory: PropertyDirectory = Depends(get_directory),
) -> list[RankedApplicantOut]:
    res = await listing_service.get_ranked_applicants_for_listing(db, engine, directory, listing_id=listing_id)
    if not res.ok:
        raise_for_error(res.err)
    return [RankedApplicantOut.from_detailed(a) for a in res.data]
