import math

import pytest

from app.domain.errors import WeightValidationError
from app.domain.policies import validate_weights
from app.domain.types import DEFAULT_WEIGHTS, SignalWeights

GOOD = {"proximity": 30, "goal_alignment": 25, "budget_fit": 20, "rating": 15, "availability": 10}


def test_defaults_are_valid_and_sum_to_100():
    assert validate_weights(DEFAULT_WEIGHTS) == DEFAULT_WEIGHTS
    assert DEFAULT_WEIGHTS.total() == 100


def test_valid_mapping_is_accepted():
    w = validate_weights({**GOOD, "proximity": 30.0})
    assert isinstance(w, SignalWeights)
    assert w.as_dict() == {k: float(v) for k, v in GOOD.items()}


def test_sum_within_tolerance_is_accepted():
    validate_weights({**GOOD, "availability": 10.05})
    validate_weights({**GOOD, "availability": 9.95})


def test_sum_off_by_five_is_rejected_with_total():
    with pytest.raises(WeightValidationError) as e:
        validate_weights({**GOOD, "proximity": 40, "rating": 10})
    assert "105" in str(e.value)
    assert "expected 100" in str(e.value)


def test_sum_just_outside_tolerance_is_rejected():
    with pytest.raises(WeightValidationError):
        validate_weights({**GOOD, "availability": 10.2})


@pytest.mark.parametrize(
    "patch,needle",
    [
        ({"rating": -5, "availability": 30}, "non-negative"),
        ({"rating": "lots"}, "must be a number"),
        ({"rating": "15"}, "must be a number"),
        ({"rating": True}, "must be a number"),
        ({"rating": math.nan}, "finite"),
        ({"rating": math.inf}, "finite"),
        ({"popularity": 0}, "unknown weights: popularity"),
    ],
)
def test_bad_values_are_rejected(patch, needle):
    with pytest.raises(WeightValidationError) as e:
        validate_weights({**GOOD, **patch})
    assert needle in str(e.value)


def test_missing_signal_is_rejected():
    data = dict(GOOD)
    del data["budget_fit"]
    with pytest.raises(WeightValidationError) as e:
        validate_weights(data)
    assert "missing weights: budget_fit" in str(e.value)
