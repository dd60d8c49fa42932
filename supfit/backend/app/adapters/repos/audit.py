# app/adapters/repos/audit.py
from __future__ import annotations

import json
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import AuditAction, AuditEvent, MatchSignalLog


class AuditRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(
        self,
        *,
        action: AuditAction,
        table: str,
        user_id: str | None,
        metadata: dict[str, Any] | None = None,
        purpose: str | None = None,
    ) -> AuditEvent:
        ev = AuditEvent(
            action=action,
            table_name=table,
            user_id=user_id,
            purpose=purpose,
            metadata_json=None if metadata is None else json.dumps(metadata, sort_keys=True, default=str),
        )
        self.session.add(ev)
        await self.session.flush()
        return ev

    async def list_for_user(self, user_id: str, *, limit: int = 100) -> list[AuditEvent]:
        q = (
            select(AuditEvent)
            .where(AuditEvent.user_id == user_id)
            .order_by(AuditEvent.id.asc())
            .limit(limit)
        )
        return list((await self.session.execute(q)).scalars().all())

    async def append_match_snapshot(self, *, user_id: str, value: float, reasoning: dict[str, Any]) -> MatchSignalLog:
        row = MatchSignalLog(
            user_id=user_id,
            signal_name="match_results_snapshot",
            signal_value=float(value),
            reasoning_json=json.dumps(reasoning, sort_keys=True, default=str),
        )
        self.session.add(row)
        await self.session.flush()
        return row
