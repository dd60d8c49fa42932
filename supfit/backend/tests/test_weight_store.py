import asyncio

import pytest

from app.domain.errors import AuditWriteError, WeightValidationError
from app.domain.types import DEFAULT_WEIGHTS, SignalWeights
from app.service_layer.unit_of_work import SqlAlchemyUnitOfWork

PROXIMITY_HEAVY = {"proximity": 40, "goal_alignment": 25, "budget_fit": 15, "rating": 10, "availability": 10}


@pytest.mark.asyncio
async def test_defaults_served_when_nothing_stored(weight_store):
    assert await weight_store.get() == DEFAULT_WEIGHTS
    assert await weight_store.history() == []


@pytest.mark.asyncio
async def test_set_replaces_active_weights_and_logs_change(weight_store):

    res = await weight_store.set(PROXIMITY_HEAVY, "admin-1", "favour nearby coaches")

    assert res.audited
    assert res.audit_error is None
    assert (await weight_store.get()).as_dict() == {k: float(v) for k, v in PROXIMITY_HEAVY.items()}

    hist = await weight_store.history()
    assert len(hist) == 1
    assert hist[0].actor_id == "admin-1"
    assert hist[0].previous_weights == DEFAULT_WEIGHTS
    assert hist[0].new_weights == SignalWeights.from_mapping(PROXIMITY_HEAVY)
    assert hist[0].reason == "favour nearby coaches"


@pytest.mark.asyncio
async def test_rejected_update_leaves_prior_config(weight_store):
    await weight_store.set(PROXIMITY_HEAVY, "admin-1")

    bad = {"proximity": 40, "goal_alignment": 25, "budget_fit": 20, "rating": 10, "availability": 10}
    with pytest.raises(WeightValidationError) as e:
        await weight_store.set(bad, "admin-2")
    assert "weights sum to 105" in str(e.value)

    assert await weight_store.get() == SignalWeights.from_mapping(PROXIMITY_HEAVY)
    assert len(await weight_store.history()) == 1


@pytest.mark.asyncio
async def test_blank_actor_is_rejected(weight_store):
    with pytest.raises(WeightValidationError):
        await weight_store.set(PROXIMITY_HEAVY, "   ")
    assert await weight_store.get() == DEFAULT_WEIGHTS


@pytest.mark.asyncio
async def test_history_is_newest_first_and_chains_previous(weight_store):
    await weight_store.set(PROXIMITY_HEAVY, "admin-1")
    await weight_store.reset_to_default("admin-2")

    hist = await weight_store.history()
    assert [h.actor_id for h in hist] == ["admin-2", "admin-1"]
    assert hist[0].previous_weights == SignalWeights.from_mapping(PROXIMITY_HEAVY)
    assert hist[0].new_weights == DEFAULT_WEIGHTS
    assert hist[0].reason == "reset to defaults"
    assert await weight_store.get() == DEFAULT_WEIGHTS


@pytest.mark.asyncio
async def test_audit_failure_keeps_update_and_is_surfaced(weight_store, monkeypatch):
    async def broken_append(self, **kwargs):
        raise RuntimeError("audit log unavailable")

    monkeypatch.setattr("app.adapters.repos.weights.WeightConfigRepository.append_change", broken_append)

    res = await weight_store.set(PROXIMITY_HEAVY, "admin-1")

    assert not res.audited
    assert isinstance(res.audit_error, AuditWriteError)
    assert "audit log unavailable" in str(res.audit_error)
    assert await weight_store.get() == SignalWeights.from_mapping(PROXIMITY_HEAVY)


@pytest.mark.asyncio
async def test_concurrent_updates_end_on_one_submitted_set(weight_store):
    sets = [
        {"proximity": 30 + i, "goal_alignment": 25 - i, "budget_fit": 20, "rating": 15, "availability": 10}
        for i in range(5)
    ]

    await asyncio.gather(*(weight_store.set(s, f"admin-{i}") for i, s in enumerate(sets)))

    current = await weight_store.get()
    assert current in [SignalWeights.from_mapping(s) for s in sets]
    hist = await weight_store.history()
    assert len(hist) == 5
    assert hist[0].new_weights == current


@pytest.mark.asyncio
async def test_invalid_stored_row_falls_back_to_defaults(async_session_maker, weight_store):
    async with SqlAlchemyUnitOfWork(async_session_maker) as uow:
        await uow.repos.weights.put_raw({"proximity": 90, "goal_alignment": 90})

    assert await weight_store.get() == DEFAULT_WEIGHTS
