from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from allocation.canonical.statuses import TERMINAL_APPLICANT_STATUSES, ApplicantStatus, ApplicationType
from allocation.core.errors import ErrorKind
from allocation.core.result import Result
from allocation.models.applicant import Applicant

log = logging.getLogger(__name__)


async def create_application(
    db: AsyncSession,
    *,
    listing_id: int,
    contact_code: str,
    name: str | None = None,
    national_registration_number: str | None = None,
    application_type: ApplicationType | None = None,
    application_date: datetime | None = None,
    status: ApplicantStatus = ApplicantStatus.Active,
) -> Result[Applicant, str]:
    applicant = Applicant(
        listing_id=listing_id,
        contact_code=contact_code,
        name=name,
        national_registration_number=national_registration_number,
        application_type=application_type.value if application_type else None,
        status=status.value,
    )
    if application_date is not None:
        applicant.application_date = application_date

    try:
        async with db.begin_nested():
            db.add(applicant)
    except IntegrityError:
        log.info("contact %s already applied for listing %s", contact_code, listing_id)
        return Result.failure(ErrorKind.Conflict.value)
    except SQLAlchemyError:
        log.exception("create_application failed for %s on listing %s", contact_code, listing_id)
        return Result.failure(ErrorKind.Unknown.value)

    # application_date may come from the server default
    await db.refresh(applicant)
    return Result.success(applicant)


async def get_applicant_by_id(db: AsyncSession, applicant_id: int) -> Applicant | None:
    stmt = select(Applicant).where(Applicant.id == applicant_id).execution_options(populate_existing=True)
    return (await db.execute(stmt)).scalar_one_or_none()



async def get_applicants_by_listing_id(
    db: AsyncSession, listing_id: int, *, status: ApplicantStatus | None = None
) -> list[Applicant]:
    stmt = select(Applicant).where(Applicant.listing_id == listing_id)
    if status is not None:
        stmt = stmt.where(Applicant.status == status.value)
    stmt = stmt.order_by(Applicant.id.asc()).execution_options(populate_existing=True)
    return list((await db.execute(stmt)).scalars().all())


async def application_exists(db: AsyncSession, contact_code: str, listing_id: int) -> bool:
    stmt = select(exists().where(
        Applicant.contact_code == contact_code,
        Applicant.listing_id == listing_id,
    ))
    return bool((await db.execute(stmt)).scalar())


async def update_applicant_status(
    db: AsyncSession,
    applicant_id: int,
    status: ApplicantStatus,
) -> Result[None, str]:
    """Terminal applicants are left untouched and reported as 'no-update'."""
    try:
        result = await db.execute(
            update(Applicant)
            .where(
                Applicant.id == applicant_id,
                Applicant.status.not_in(sorted(TERMINAL_APPLICANT_STATUSES)),
            )
            .values(status=status.value)
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError:
        log.exception("update_applicant_status failed for %s -> %s", applicant_id, status.value)
        return Result.failure(ErrorKind.Unknown.value)

    if not result.rowcount:
        return Result.failure(ErrorKind.NoUpdate.value)
    return Result.success(None)
