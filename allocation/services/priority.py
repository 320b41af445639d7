from __future__ import annotations

from typing import Sequence

from allocation.canonical.applicant import DetailedApplicant, ListingView
from allocation.canonical.contracts import Lease
from allocation.canonical.statuses import ApplicationType
from allocation.core.errors import InvariantViolationError
from allocation.services.rental_rules import RentalRuleEngine, RuleFamily, RuleOutcome


def is_in_listing_area(listing: ListingView, lease: Lease, *, property_only: bool = False) -> bool:
    """
    A lease counts as "in the area" when it shares district or property with the listing.
    Listings governed by property rules only count the property.
    """
    if not property_only and listing.district_code and lease.residential_area_code == listing.district_code:
        return True
    return bool(listing.estate_code) and lease.estate_code == listing.estate_code


def assign_priority(
    listing: ListingView,
    applicant: DetailedApplicant,
    *,
    outcome: RuleOutcome | None = None,
) -> DetailedApplicant:
    """
    Returns a copy of the applicant with `priority` set.

    1: no parking space in the area and lives (or will live) there,
       or holds exactly one parking space there and wants to replace it
    2: one parking space there and wants an additional one,
       or two or more there and wants to replace one
    3: two or more there and wants an additional one
    None: not entitled to the listing, including when the rental rules
          found the applicant ineligible
    """
    if applicant.listing_id != listing.id:
        raise InvariantViolationError(
            f"applicant {applicant.contact_code} does not belong to listing {listing.id}"
        )

    if outcome is not None and not outcome.eligible:
        return applicant.model_copy(update={"priority": None})

    property_only = outcome is not None and outcome.rule == RuleFamily.Property
    in_area = [
        c for c in applicant.parking_space_contracts
        if is_in_listing_area(listing, c, property_only=property_only)
    ]
    lives_in_area = any(
        is_in_listing_area(listing, c, property_only=property_only)
        for c in applicant.housing_status.contracts()
    )
    application_type = applicant.application_type

    priority: int | None = None
    if not in_area and lives_in_area:
        priority = 1
    elif len(in_area) == 1 and application_type == ApplicationType.Replace:
        priority = 1
    elif len(in_area) == 1 and application_type == ApplicationType.Additional:
        priority = 2
    elif len(in_area) >= 2 and application_type == ApplicationType.Replace:
        priority = 2
    elif len(in_area) >= 2 and application_type == ApplicationType.Additional:
        priority = 3

    return applicant.model_copy(update={"priority": priority})


def add_priority_to_applicants_based_on_rental_rules(
    listing: ListingView,
    applicants: Sequence[DetailedApplicant],
    engine: RentalRuleEngine | None = None,
) -> list[DetailedApplicant]:
    """Without an engine every applicant is treated as eligible."""
    return [
        assign_priority(listing, a, outcome=engine.evaluate(listing, a) if engine else None)
        for a in applicants
    ]
