# app/domain/signals.py
from __future__ import annotations

import math

from .location import distance_km
from .types import Candidate, SearchCriteria, Signal

RATING_SCALE = 5.0
CREDIBLE_REVIEW_COUNT = 5


def clamp01(x: float) -> float:
    if x is None or math.isnan(x):
        return 0.0
    return max(0.0, min(1.0, float(x)))


def proximity(candidate: Candidate, criteria: SearchCriteria) -> float | None:
    """
    1 at the user's location, 0 at (or beyond) the search radius.
    None when either side has no usable location: the signal is then
    inapplicable and drops out of the weighted denominator.
    """
    origin = criteria.origin_location
    target = candidate.location_fix
    if origin is None or target is None or not origin.is_known or not target.is_known:
        return None
    radius = float(criteria.radius_km or 0.0)
    d = distance_km(origin, target)
    if radius <= 0:
        return 1.0 if d == 0 else 0.0
    return clamp01(1.0 - d / radius)


def goal_alignment(candidate: Candidate, criteria: SearchCriteria) -> float:
    goals = criteria.goal_categories
    if not goals:
        return 0.0
    matched = goals & candidate.specialties
    return clamp01(len(matched) / len(goals))


def budget_fit(candidate: Candidate, criteria: SearchCriteria) -> float:
    """
    1 within budget; linear decay to 0 once price is 2x max_price.
    """
    max_price = criteria.max_price
    if max_price is None:
        return 1.0
    price = max(0.0, float(candidate.price_value or 0.0))
    budget = max(0.0, float(max_price))
    if price <= budget:
        return 1.0
    if budget == 0:
        return 0.0
    overage = (price - budget) / budget
    return clamp01(1.0 - overage)


def rating(candidate: Candidate, criteria: SearchCriteria | None = None) -> float:
    base = clamp01(float(candidate.rating_value or 0.0) / RATING_SCALE)
    reviews = max(0, int(candidate.review_count or 0))
    if reviews < CREDIBLE_REVIEW_COUNT:
        base *= reviews / CREDIBLE_REVIEW_COUNT
    return clamp01(base)


def availability(candidate: Candidate, criteria: SearchCriteria) -> float:
    if not candidate.has_open_slot:
        return 0.0
    if criteria.modes and not (criteria.modes & candidate.available_modes):
        return 0.0
    if criteria.timings and not (criteria.timings & candidate.available_timings):
        return 0.0
    return 1.0


def compute_signals(candidate: Candidate, criteria: SearchCriteria) -> dict[Signal, float | None]:
    return {
        Signal.proximity: proximity(candidate, criteria),
        Signal.goal_alignment: goal_alignment(candidate, criteria),
        Signal.budget_fit: budget_fit(candidate, criteria),
        Signal.rating: rating(candidate, criteria),
        Signal.availability: availability(candidate, criteria),
    }


def explain_signal(signal: Signal, candidate: Candidate, criteria: SearchCriteria) -> str:
    """Short human-readable reason for one sub-score."""
    if signal == Signal.proximity:
        origin, target = criteria.origin_location, candidate.location_fix
        if origin is None or target is None or not origin.is_known or not target.is_known:
            return "location unknown"
        return f"{distance_km(origin, target):.1f} km of {criteria.radius_km:g} km radius"
    if signal == Signal.goal_alignment:
        n = len(criteria.goal_categories & candidate.specialties)
        return f"{n}/{len(criteria.goal_categories)} goals matched"
    if signal == Signal.budget_fit:
        if criteria.max_price is None:
            return "no budget set"
        return f"price {candidate.price_value:g} vs max {criteria.max_price:g}"
    if signal == Signal.rating:
        return f"{candidate.rating_value:g}/5 ({candidate.review_count} reviews)"
    return "open slot" if availability(candidate, criteria) else "no matching slot"
