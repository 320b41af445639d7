from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from allocation.api.deps import get_directory, get_rule_engine
from allocation.api.errors import raise_for_error
from allocation.core.db import get_db
from allocation.schemas.applicant import ApplicantOut, ApplicationCreate, ApplicationTypeOut, WithdrawRequest
from allocation.services import applications
from allocation.services.directory import PropertyDirectory
from allocation.services.rental_rules import RentalRuleEngine

router = APIRouter()


@router.post("/listings/{listing_id}/applicants", response_model=ApplicantOut, status_code=201)
async def apply_for_listing(
    listing_id: int,
    payload: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
    engine: RentalRuleEngine = Depends(get_rule_engine),
    directory: PropertyDirectory = Depends(get_directory),
) -> ApplicantOut:
    res = await applications.apply_for_listing(
        db,
        engine,
        directory,
        listing_id=listing_id,
        contact_code=payload.contact_code,
        application_date=payload.application_date,
    )
    if not res.ok:
        raise_for_error(res.err)

    await db.commit()
    return ApplicantOut.model_validate(res.data)


@router.patch("/applicants/{applicant_id}/withdraw", status_code=204)
async def withdraw_application(
    applicant_id: int,
    payload: WithdrawRequest,
    db: AsyncSession = Depends(get_db),
) -> None:
    res = await applications.withdraw_application(
        db,
        applicant_id=applicant_id,
        contact_code=payload.contact_code,
        by_admin=payload.by_admin,
    )
    if not res.ok:
        raise_for_error(res.err)
    await db.commit()


@router.get(
    "/applicants/application-type/{contact_code}/{rental_object_code}",
    response_model=ApplicationTypeOut,
)
async def get_application_type(
    contact_code: str,
    rental_object_code: str,
    db: AsyncSession = Depends(get_db),
    engine: RentalRuleEngine = Depends(get_rule_engine),
    directory: PropertyDirectory = Depends(get_directory),
) -> ApplicationTypeOut:
    res = await applications.determine_application_type(
        db, engine, directory, contact_code=contact_code, rental_object_code=rental_object_code
    )
    if not res.ok:
        raise_for_error(res.err)

    outcome = res.data
    return ApplicationTypeOut(
        eligible=outcome.eligible,
        application_type=outcome.application_type.value if outcome.application_type else None,
        reason=outcome.reason.value,
        rule=outcome.rule.value,
    )
