# app/domain/policies.py
from __future__ import annotations

import math
from typing import Any, Mapping

from .errors import InvalidSearchCriteria, WeightValidationError
from .types import SIGNALS, Candidate, SearchCriteria, SignalWeights

WEIGHT_TOTAL = 100.0
WEIGHT_TOLERANCE = 0.1


def validate_weights(data: Mapping[str, Any] | SignalWeights) -> SignalWeights:
    """
    Returns a SignalWeights or raises WeightValidationError with a hint the
    admin can act on. Never coerces a bad set into a good one.
    """
    raw = data.as_dict() if isinstance(data, SignalWeights) else dict(data or {})

    expected = {s.value for s in SIGNALS}
    missing = sorted(expected - set(raw))
    extra = sorted(set(raw) - expected)
    if missing:
        raise WeightValidationError(f"missing weights: {', '.join(missing)}")
    if extra:
        raise WeightValidationError(f"unknown weights: {', '.join(extra)}")

    values: dict[str, float] = {}
    for k in sorted(expected):
        v = raw[k]
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise WeightValidationError(f"weight {k} must be a number, got {v!r}")
        f = float(v)
        if math.isnan(f) or math.isinf(f):
            raise WeightValidationError(f"weight {k} must be finite, got {v!r}")
        if f < 0:
            raise WeightValidationError(f"weight {k} must be non-negative, got {f:g}")
        values[k] = f

    total = sum(values.values())
    if abs(total - WEIGHT_TOTAL) > WEIGHT_TOLERANCE:
        raise WeightValidationError(f"weights sum to {total:g}, expected {WEIGHT_TOTAL:g}")

    return SignalWeights.from_mapping(values)


def validate_criteria(criteria: SearchCriteria) -> None:
    if not criteria.goal_categories:
        raise InvalidSearchCriteria("at least one goal category is required")
    if criteria.result_limit is not None and criteria.result_limit < 1:
        raise InvalidSearchCriteria(f"result_limit must be >= 1, got {criteria.result_limit}")
    if criteria.radius_km is not None and criteria.radius_km < 0:
        raise InvalidSearchCriteria(f"radius_km must be >= 0, got {criteria.radius_km}")


def passes_filters(candidate: Candidate, criteria: SearchCriteria) -> bool:
    """
    Hard filters applied before scoring. max_price is a signal (budget fit),
    not a filter; min_rating excludes.
    """
    if criteria.min_rating is not None and float(candidate.rating_value or 0.0) < float(criteria.min_rating):
        return False
    return True
