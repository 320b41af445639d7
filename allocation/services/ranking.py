from __future__ import annotations

from typing import Sequence

from allocation.canonical.applicant import DetailedApplicant, ListingView
from allocation.services.priority import add_priority_to_applicants_based_on_rental_rules
from allocation.services.rental_rules import RentalRuleEngine


def _rank_key(applicant: DetailedApplicant) -> tuple[bool, int, int]:
    # unprioritized last, then priority ascending, then longest wait first
    return (applicant.priority is None, applicant.priority or 0, -applicant.queue_points)


def sort_applicants_based_on_rental_rules(applicants: Sequence[DetailedApplicant]) -> list[DetailedApplicant]:
    # sorted() is stable: equal keys keep their input order
    return sorted(applicants, key=_rank_key)


def rank_applicants(
    listing: ListingView,
    applicants: Sequence[DetailedApplicant],
    engine: RentalRuleEngine | None = None,
) -> list[DetailedApplicant]:
    return sort_applicants_based_on_rental_rules(
        add_priority_to_applicants_based_on_rental_rules(listing, applicants, engine)
    )
