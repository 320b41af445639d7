from datetime import datetime, timedelta, timezone

import pytest

from allocation.canonical.contracts import Lease, WaitingList
from allocation.services import applicant_details

from tests.fakes import housing_lease, parking_lease
from tests.fixtures_seed import seed_applicant, seed_listing


NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


def _lease(lease_id: str, *, start: datetime, type: str = "Bostadskontrakt", **dates) -> Lease:
    return Lease(lease_id=lease_id, rental_property_id=f"RP-{lease_id}", type=type, lease_start_date=start, **dates)


def test_lease_with_passed_dates_is_not_active():
    assert applicant_details.is_lease_active_or_upcoming(_lease("A", start=NOW - timedelta(days=9)), now=NOW)
    assert applicant_details.is_lease_active_or_upcoming(_lease("B", start=NOW + timedelta(days=9)), now=NOW)
    assert not applicant_details.is_lease_active_or_upcoming(
        _lease("C", start=NOW - timedelta(days=90), last_debit_date=NOW - timedelta(days=1)), now=NOW
    )
    assert not applicant_details.is_lease_active_or_upcoming(
        _lease("D", start=NOW - timedelta(days=90), termination_date=NOW - timedelta(days=1)), now=NOW
    )
    assert applicant_details.is_lease_active_or_upcoming(
        _lease("E", start=NOW - timedelta(days=90), termination_date=NOW + timedelta(days=30)), now=NOW
    )


def test_naive_registry_dates_are_treated_as_utc():
    lease = _lease("A", start=datetime(2020, 1, 1), last_debit_date=datetime(2026, 5, 31, 23, 0))
    assert not applicant_details.is_lease_active_or_upcoming(lease, now=NOW)


def test_single_housing_contract_started_is_current():
    lease = _lease("A", start=NOW - timedelta(days=1))
    assert applicant_details.parse_leases_for_housing_contracts([lease], now=NOW) == (lease, None)


def test_single_housing_contract_not_started_is_upcoming():
    lease = _lease("A", start=NOW + timedelta(days=1))
    assert applicant_details.parse_leases_for_housing_contracts([lease], now=NOW) == (None, lease)


def test_two_housing_contracts_split_into_current_and_upcoming():
    current = _lease("A", start=NOW - timedelta(days=300), last_debit_date=NOW + timedelta(days=20))
    upcoming = _lease("B", start=NOW + timedelta(days=21))
    parking = _lease("C", start=NOW - timedelta(days=3), type="P-Platskontrakt")

    result = applicant_details.parse_leases_for_housing_contracts([upcoming, parking, current], now=NOW)
    assert result == (current, upcoming)


def test_started_lease_without_last_debit_date_is_current():
    # moving: the old home is still debited while the new one has started
    old = _lease(
        "OLD",
        start=datetime(2020, 1, 1, tzinfo=timezone.utc),
        last_debit_date=datetime(2026, 6, 30, tzinfo=timezone.utc),
    )
    new = _lease("NEW", start=datetime(2026, 5, 15, tzinfo=timezone.utc))

    assert applicant_details.parse_leases_for_housing_contracts([old, new], now=NOW) == (new, None)
    assert applicant_details.parse_leases_for_housing_contracts([new, old], now=NOW) == (new, None)


def test_no_housing_contract():
    parking = _lease("C", start=NOW - timedelta(days=3), type="P-Platskontrakt")
    assert applicant_details.parse_leases_for_housing_contracts([parking], now=NOW) is None


def test_parking_spaces_are_recognised_by_property_type():
    leases = [housing_lease("H1"), parking_lease("P1"), parking_lease("P2")]
    assert [lease.lease_id for lease in applicant_details.parse_leases_for_parking_spaces(leases)] == ["P1", "P2"]


def test_internal_parking_space_waiting_list():
    lists = [
        WaitingList(waiting_list_type_caption="Bostad", queue_points=900),
        WaitingList(waiting_list_type_caption="Bilplats (intern)", queue_points=42),
        WaitingList(waiting_list_type_caption="Bilplats (extern)", queue_points=7),
    ]
    assert applicant_details.parse_waiting_list_for_internal_parking_space(lists).queue_points == 42
    assert applicant_details.parse_waiting_list_for_internal_parking_space(lists[:1]) is None


async def test_get_tenant_assembles_contracts(directory):
    directory.add_tenant(
        "P000001",
        queue_points=120,
        leases=[
            housing_lease("H1", area="OXB", estate_code="24104"),
            housing_lease("H2", area="CEN", started_days_ago=-14),
            parking_lease("P1", area="OXB", estate_code="24104"),
        ],
    )

    res = await applicant_details.get_tenant("P000001", directory)

    assert res.ok, res.err
    tenant = res.data
    assert tenant.queue_points == 120
    assert tenant.current_housing_contract.lease_id == "H1"
    assert tenant.current_housing_contract.estate_code == "24104"
    assert tenant.upcoming_housing_contract.residential_area_code == "CEN"
    assert [c.lease_id for c in tenant.parking_space_contracts] == ["P1"]
    assert tenant.parking_space_contracts[0].residential_area_code == "OXB"
    assert tenant.housing_status.governing().lease_id == "H2"


@pytest.mark.parametrize(
    "failing, expected",
    [
        ("get-contact", "get-contact"),
        ("get-waiting-lists", "get-waiting-lists"),
        ("get-leases", "get-leases"),
        ("get-residential-area", "get-residential-area"),
        ("get-estate-code", "get-lease-property-info"),
    ],
)
async def test_get_tenant_registry_failures_are_tagged(directory, failing, expected):
    directory.add_tenant("P000001", leases=[housing_lease("H1", area="OXB")])
    directory.failing.add(failing)

    res = await applicant_details.get_tenant("P000001", directory)
    assert res.err == expected


async def test_get_tenant_business_failures(directory):
    assert (await applicant_details.get_tenant("P000404", directory)).err == "contact-not-found"

    directory.add_tenant("P000002", leases=[housing_lease("H2")], is_tenant=False)
    assert (await applicant_details.get_tenant("P000002", directory)).err == "contact-not-tenant"

    directory.add_tenant("P000003", leases=[housing_lease("H3")], waiting_list="Förråd")
    assert (await applicant_details.get_tenant("P000003", directory)).err == "waiting-list-not-found"

    directory.add_tenant("P000004", leases=[parking_lease("P4")])
    assert (await applicant_details.get_tenant("P000004", directory)).err == "housing-contracts-not-found"


async def test_get_detailed_applicant(db_session, directory):
    listing = await seed_listing(db_session)
    applicant = await seed_applicant(db_session, listing.id, contact_code="P000001")
    directory.add_tenant("P000001", queue_points=15, leases=[housing_lease("H1", area="OXB")], is_tenant=False)

    res = await applicant_details.get_detailed_applicant(applicant, directory)

    assert res.ok, res.err
    detailed = res.data
    assert detailed.id == applicant.id
    assert detailed.listing_id == listing.id
    assert detailed.queue_points == 15
    assert detailed.application_type.value == "Additional"
    assert detailed.priority is None
    assert detailed.current_housing_contract.residential_area_code == "OXB"
