# app/entrypoints/api/routers/weights.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import require_api_key, weight_store
from ....domain.errors import WeightValidationError
from ....domain.types import WeightChangeRecord
from ....schemas import (
    SignalWeightsOut,
    WeightChangeOut,
    WeightResetIn,
    WeightUpdateIn,
    WeightUpdateOut,
)
from ....service_layer.weights import WeightConfigStore, WeightUpdateResult

router = APIRouter(prefix="/admin/weights", tags=["weights"], dependencies=[Depends(require_api_key)])


def _change_out(rec: WeightChangeRecord) -> WeightChangeOut:
    return WeightChangeOut(
        actor_id=rec.actor_id,
        previous_weights=SignalWeightsOut(**rec.previous_weights.as_dict()),
        new_weights=SignalWeightsOut(**rec.new_weights.as_dict()),
        reason=rec.reason,
        timestamp=rec.timestamp,
    )


def _update_out(res: WeightUpdateResult) -> WeightUpdateOut:
    return WeightUpdateOut(
        weights=SignalWeightsOut(**res.weights.as_dict()),
        change=_change_out(res.record),
        audited=res.audited,
        audit_error=str(res.audit_error) if res.audit_error else None,
    )


@router.get("", response_model=SignalWeightsOut)
async def get_weights(store: WeightConfigStore = Depends(weight_store)) -> SignalWeightsOut:
    return SignalWeightsOut(**(await store.get()).as_dict())


@router.put("", response_model=WeightUpdateOut)
async def update_weights(
    body: WeightUpdateIn,
    store: WeightConfigStore = Depends(weight_store),
) -> WeightUpdateOut:
    try:
        res = await store.set(body.weights, body.actor_id, body.reason)
    except WeightValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _update_out(res)


@router.post("/reset", response_model=WeightUpdateOut)
async def reset_weights(
    body: WeightResetIn,
    store: WeightConfigStore = Depends(weight_store),
) -> WeightUpdateOut:
    try:
        res = await store.reset_to_default(body.actor_id, body.reason)
    except WeightValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _update_out(res)


@router.get("/history", response_model=list[WeightChangeOut])
async def weight_history(
    limit: int = Query(50, ge=1, le=500),
    store: WeightConfigStore = Depends(weight_store),
) -> list[WeightChangeOut]:
    return [_change_out(r) for r in await store.history(limit=limit)]
