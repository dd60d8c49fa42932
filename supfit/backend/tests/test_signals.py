import pytest

from app.domain import signals
from app.domain.types import LocationFix, Signal

from factories import make_candidate, make_criteria, north_of_pune


def test_proximity_is_one_at_origin_and_zero_at_radius():
    crit = make_criteria(radius_km=10.0)
    assert signals.proximity(make_candidate(), crit) == pytest.approx(1.0)

    at_half = make_candidate(location_fix=north_of_pune(5.0))
    assert signals.proximity(at_half, crit) == pytest.approx(0.5, abs=1e-6)

    beyond = make_candidate(location_fix=north_of_pune(25.0))
    assert signals.proximity(beyond, crit) == 0.0


def test_proximity_is_inapplicable_without_a_known_location():
    crit = make_criteria()
    assert signals.proximity(make_candidate(location_fix=None), crit) is None
    assert signals.proximity(make_candidate(location_fix=LocationFix.unavailable()), crit) is None
    assert signals.proximity(make_candidate(), make_criteria(origin_location=None)) is None
    assert signals.proximity(make_candidate(), make_criteria(origin_location=LocationFix.unavailable())) is None


def test_proximity_zero_radius_only_matches_same_point():
    crit = make_criteria(radius_km=0.0)
    assert signals.proximity(make_candidate(), crit) == 1.0
    assert signals.proximity(make_candidate(location_fix=north_of_pune(0.5)), crit) == 0.0


def test_goal_alignment_is_fraction_of_goals_covered():
    crit = make_criteria(goal_categories=frozenset({"weight loss", "nutrition"}))
    assert signals.goal_alignment(make_candidate(specialties=frozenset({"weight loss"})), crit) == 0.5
    assert signals.goal_alignment(
        make_candidate(specialties=frozenset({"weight loss", "nutrition", "yoga"})), crit
    ) == 1.0
    assert signals.goal_alignment(make_candidate(specialties=frozenset()), crit) == 0.0


def test_budget_fit_decays_linearly_to_twice_budget():
    crit = make_criteria(max_price=1000.0)
    assert signals.budget_fit(make_candidate(price_value=800.0), crit) == 1.0
    assert signals.budget_fit(make_candidate(price_value=1000.0), crit) == 1.0
    assert signals.budget_fit(make_candidate(price_value=1500.0), crit) == pytest.approx(0.5)
    assert signals.budget_fit(make_candidate(price_value=2000.0), crit) == 0.0
    assert signals.budget_fit(make_candidate(price_value=5000.0), crit) == 0.0


def test_budget_fit_without_budget_is_full():
    assert signals.budget_fit(make_candidate(price_value=99999.0), make_criteria(max_price=None)) == 1.0


def test_budget_fit_zero_budget():
    crit = make_criteria(max_price=0.0)
    assert signals.budget_fit(make_candidate(price_value=0.0), crit) == 1.0
    assert signals.budget_fit(make_candidate(price_value=1.0), crit) == 0.0


def test_rating_discounts_thin_review_counts():
    crit = make_criteria()
    assert signals.rating(make_candidate(rating_value=4.5, review_count=10), crit) == pytest.approx(0.9)
    assert signals.rating(make_candidate(rating_value=5.0, review_count=2), crit) == pytest.approx(0.4)
    assert signals.rating(make_candidate(rating_value=5.0, review_count=0), crit) == 0.0


def test_availability_requires_open_slot_and_overlap():
    crit = make_criteria(modes=frozenset({"online"}), timings=frozenset({"morning"}))
    assert signals.availability(make_candidate(), crit) == 1.0
    assert signals.availability(make_candidate(has_open_slot=False), crit) == 0.0
    assert signals.availability(make_candidate(available_modes=frozenset({"in-person"})), crit) == 0.0
    assert signals.availability(make_candidate(available_timings=frozenset({"evening"})), crit) == 0.0
    # no preference means any open slot counts
    assert signals.availability(make_candidate(available_modes=frozenset()), make_criteria()) == 1.0


def test_compute_signals_covers_every_signal_in_unit_range():
    crit = make_criteria(max_price=500.0)
    cand = make_candidate(price_value=700.0, rating_value=3.9, review_count=7)
    out = signals.compute_signals(cand, crit)
    assert set(out) == set(Signal)
    for v in out.values():
        assert v is None or 0.0 <= v <= 1.0


def test_signals_are_pure():
    crit = make_criteria()
    cand = make_candidate()
    assert signals.compute_signals(cand, crit) == signals.compute_signals(cand, crit)


def test_explain_signal_mentions_unknown_location():
    crit = make_criteria(origin_location=None)
    assert signals.explain_signal(Signal.proximity, make_candidate(), crit) == "location unknown"
    assert signals.explain_signal(Signal.goal_alignment, make_candidate(), crit) == "1/1 goals matched"
