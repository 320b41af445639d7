import random

from allocation.canonical.applicant import ListingView
from allocation.canonical.statuses import ApplicationType
from allocation.services.ranking import rank_applicants, sort_applicants_based_on_rental_rules

from tests.fakes import housing_lease, make_applicant, parking_lease


def test_priority_then_queue_points():
    a3 = make_applicant(3, priority=3, queue_points=60)
    a1 = make_applicant(1, priority=1, queue_points=10)
    a2 = make_applicant(2, priority=1, queue_points=30)

    ranked = sort_applicants_based_on_rental_rules([a3, a1, a2])
    assert [a.id for a in ranked] == [2, 1, 3]


def test_unprioritized_applicants_sort_last():
    ranked = sort_applicants_based_on_rental_rules([
        make_applicant(1, priority=None, queue_points=1000),
        make_applicant(2, priority=3, queue_points=0),
        make_applicant(3, priority=None, queue_points=5),
    ])
    assert [a.id for a in ranked] == [2, 1, 3]


def test_total_order_holds_for_arbitrary_input():
    rnd = random.Random(1234)
    applicants = [
        make_applicant(i, priority=rnd.choice([1, 2, 3]), queue_points=rnd.randint(0, 50))
        for i in range(1, 200)
    ]
    ranked = sort_applicants_based_on_rental_rules(applicants)

    for prev, nxt in zip(ranked, ranked[1:]):
        assert prev.priority <= nxt.priority
        if prev.priority == nxt.priority:
            assert prev.queue_points >= nxt.queue_points


def test_equal_keys_keep_input_order():
    applicants = [make_applicant(i, priority=2, queue_points=7) for i in (5, 3, 9, 1)]
    ranked = sort_applicants_based_on_rental_rules(applicants)
    assert [a.id for a in ranked] == [5, 3, 9, 1]


def test_input_is_not_reordered_in_place():
    applicants = [make_applicant(1, priority=2), make_applicant(2, priority=1)]
    sort_applicants_based_on_rental_rules(applicants)
    assert [a.id for a in applicants] == [1, 2]


def test_rank_applicants_prioritizes_then_sorts():
    listing = ListingView(id=1, rental_object_code="705-025-03-0001", district_code="OXB")
    a1 = make_applicant(1, current=housing_lease("H1", area="OXB"), application_type=ApplicationType.Additional, queue_points=10)
    a2 = make_applicant(
        2,
        current=housing_lease("H2", area="OXB"),
        parking=(parking_lease("P2", area="OXB"),),
        application_type=ApplicationType.Replace,
        queue_points=30,
    )
    a3 = make_applicant(
        3,
        current=housing_lease("H3", area="OXB"),
        parking=(parking_lease("P3a", area="OXB"), parking_lease("P3b", area="OXB")),
        application_type=ApplicationType.Additional,
        queue_points=60,
    )

    ranked = rank_applicants(listing, [a3, a1, a2])
    assert [(a.id, a.priority) for a in ranked] == [(2, 1), (1, 1), (3, 3)]
