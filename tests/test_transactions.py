from sqlalchemy import func, select

from allocation.canonical.statuses import ListingStatus
from allocation.core.result import Result
from allocation.models.audit_log import AuditLog
from allocation.repositories import listings as listings_repo
from allocation.services import audit as audit_service
from allocation.services.transactions import StepName, TransactionStep, run_in_transaction

from tests.fixtures_seed import seed_listing


def _set_status(listing_id: int, status: ListingStatus) -> TransactionStep:
    return TransactionStep(
        StepName.UpdateListing,
        lambda tx: listings_repo.update_listing_statuses(tx, [listing_id], status),
    )


def _audit(action: str) -> TransactionStep:
    return TransactionStep(StepName.WriteAudit, lambda tx: audit_service.audit(tx, action=action))


async def _fails(tx):
    return Result.failure("no-update")


async def _raises(tx):
    raise RuntimeError("connection reset")


async def _audit_count(db) -> int:
    return (await db.execute(select(func.count()).select_from(AuditLog))).scalar_one()


async def test_all_steps_succeed(db_session):
    listing_id = (await seed_listing(db_session)).id

    res = await run_in_transaction(db_session, [_set_status(listing_id, ListingStatus.Assigned), _audit("test.ok")])

    assert res.ok is True
    assert res.data is None
    listing = await listings_repo.get_listing_by_id(db_session, listing_id)
    assert listing.status == ListingStatus.Assigned.value
    assert await _audit_count(db_session) == 1


async def test_failing_step_is_named_and_rolls_back_earlier_steps(db_session):
    listing_id = (await seed_listing(db_session)).id

    res = await run_in_transaction(
        db_session,
        [
            _set_status(listing_id, ListingStatus.Assigned),
            _audit("test.rolled-back"),
            TransactionStep(StepName.UpdateOffer, _fails),
        ],
    )

    assert res.ok is False
    assert res.err == "update-offer"
    listing = await listings_repo.get_listing_by_id(db_session, listing_id)
    assert listing.status == ListingStatus.Active.value
    assert await _audit_count(db_session) == 0


async def test_raising_step_becomes_tagged_result(db_session):
    listing_id = (await seed_listing(db_session)).id

    res = await run_in_transaction(
        db_session,
        [_set_status(listing_id, ListingStatus.Assigned), TransactionStep(StepName.UpdateApplicant, _raises)],
    )

    assert res == Result.failure("update-applicant")
    listing = await listings_repo.get_listing_by_id(db_session, listing_id)
    assert listing.status == ListingStatus.Active.value


async def test_later_steps_do_not_run_after_a_failure(db_session):
    calls = []

    async def _record(tx):
        calls.append("ran")
        return Result.success(None)

    res = await run_in_transaction(
        db_session,
        [TransactionStep(StepName.UpdateListing, _fails), TransactionStep(StepName.UpdateOffer, _record)],
    )

    assert res.err == "update-listing"
    assert calls == []


async def test_opens_its_own_transaction_when_none_is_active(db_session):
    listing_id = (await seed_listing(db_session)).id
    await db_session.commit()
    assert db_session.in_transaction() is False

    res = await run_in_transaction(db_session, [_set_status(listing_id, ListingStatus.Expired)])

    assert res.ok is True
    listing = await listings_repo.get_listing_by_id(db_session, listing_id)
    assert listing.status == ListingStatus.Expired.value
