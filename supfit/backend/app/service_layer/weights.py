# app/service_layer/weights.py
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..domain.errors import AuditWriteError, WeightValidationError
from ..domain.policies import validate_weights
from ..domain.types import DEFAULT_WEIGHTS, SignalWeights, WeightChangeRecord
from ..models import ConfigAuditLog, utcnow
from .unit_of_work import SessionFactory, SqlAlchemyUnitOfWork

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeightUpdateResult:
    weights: SignalWeights
    record: WeightChangeRecord
    # set when the config was saved but the audit append failed
    audit_error: AuditWriteError | None = None

    @property
    def audited(self) -> bool:
        return self.audit_error is None


def _record_from_row(row: ConfigAuditLog) -> WeightChangeRecord:
    old = json.loads(row.old_value_json) if row.old_value_json else None
    return WeightChangeRecord(
        actor_id=row.actor_id,
        previous_weights=SignalWeights.from_mapping(old) if old else DEFAULT_WEIGHTS,
        new_weights=SignalWeights.from_mapping(json.loads(row.new_value_json)),
        timestamp=row.created_at,
        reason=row.change_reason,
    )


class WeightConfigStore:
    """
    The single active signal-weight configuration plus its append-only change log.

    Writes are serialised per process and hit one row via upsert, so the stored
    set is always exactly one submitted set.
    """

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self.session_factory = session_factory
        self._write_lock = asyncio.Lock()

    async def get(self) -> SignalWeights:
        async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
            raw = await uow.repos.weights.get_raw()
        if raw is None:
            return DEFAULT_WEIGHTS
        try:
            return validate_weights(raw)
        except ValueError:
            # a row that no longer validates is never served
            log.error("stored signal weights are invalid; serving defaults")
            return DEFAULT_WEIGHTS

    async def set(
        self,
        weights: Mapping[str, Any] | SignalWeights,
        actor_id: str,
        reason: str | None = None,
    ) -> WeightUpdateResult:
        """
        Validate, replace the active set, then append the change record.
        Raises WeightValidationError before touching storage.
        """
        new = validate_weights(weights)
        if not actor_id or not str(actor_id).strip():
            raise WeightValidationError("actor_id is required for weight changes")

        async with self._write_lock:
            async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
                prev_raw = await uow.repos.weights.get_raw()
                await uow.repos.weights.put_raw(new.as_dict())

            previous = DEFAULT_WEIGHTS
            if prev_raw is not None:
                try:
                    previous = validate_weights(prev_raw)
                except ValueError:
                    previous = DEFAULT_WEIGHTS

            now = utcnow()
            record = WeightChangeRecord(
                actor_id=str(actor_id),
                previous_weights=previous,
                new_weights=new,
                timestamp=now,
                reason=reason,
            )

            audit_error = None
            try:
                async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
                    await uow.repos.weights.append_change(
                        actor_id=record.actor_id,
                        old_value=None if prev_raw is None else previous.as_dict(),
                        new_value=new.as_dict(),
                        reason=reason,
                        created_at=now,
                    )
            except Exception as e:
                # config stays updated; caller is told the audit trail has a gap
                audit_error = AuditWriteError(f"audit append failed: {type(e).__name__}: {e}")
                log.warning("weight change saved but not audited actor=%s err=%s", actor_id, type(e).__name__)

        log.info("signal weights updated actor=%s weights=%s", actor_id, new.as_dict())
        return WeightUpdateResult(weights=new, record=record, audit_error=audit_error)

    async def reset_to_default(self, actor_id: str, reason: str | None = None) -> WeightUpdateResult:
        return await self.set(DEFAULT_WEIGHTS, actor_id, reason or "reset to defaults")

    async def history(self, *, limit: int = 50) -> list[WeightChangeRecord]:
        async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
            rows = await uow.repos.weights.list_changes(limit=limit)
            return [_record_from_row(r) for r in rows]
