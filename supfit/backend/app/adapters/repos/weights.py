# app/adapters/repos/weights.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import ConfigAuditLog, MatchConfig, utcnow
from .upsert import upsert_stmt

SIGNAL_WEIGHTS_KEY = "signal_weights"


class WeightConfigRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_raw(self, config_key: str = SIGNAL_WEIGHTS_KEY) -> dict[str, Any] | None:
        q = select(MatchConfig).where(MatchConfig.config_key == config_key)
        row = (await self.session.execute(q)).scalars().first()
        if row is None:
            return None
        data = json.loads(row.config_value_json or "{}")
        return data if isinstance(data, dict) else None

    async def put_raw(self, value: dict[str, Any], config_key: str = SIGNAL_WEIGHTS_KEY) -> None:
        stmt = upsert_stmt(
            self.session,
            MatchConfig,
            {
                "config_key": config_key,
                "config_value_json": json.dumps(value, sort_keys=True),
                "description": "Signal weights for matching algorithm",
                "updated_at": utcnow(),
            },
            index_elements=["config_key"],
            update_cols=["config_value_json", "description", "updated_at"],
        )
        await self.session.execute(stmt)

    async def append_change(
        self,
        *,
        actor_id: str,
        old_value: dict[str, Any] | None,
        new_value: dict[str, Any],
        reason: str | None,
        created_at: datetime,
        config_key: str = SIGNAL_WEIGHTS_KEY,
    ) -> ConfigAuditLog:
        row = ConfigAuditLog(
            actor_id=actor_id,
            config_key=config_key,
            old_value_json=None if old_value is None else json.dumps(old_value, sort_keys=True),
            new_value_json=json.dumps(new_value, sort_keys=True),
            change_reason=reason,
            created_at=created_at,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def list_changes(self, *, limit: int = 50, config_key: str = SIGNAL_WEIGHTS_KEY) -> list[ConfigAuditLog]:
        q = (
            select(ConfigAuditLog)
            .where(ConfigAuditLog.config_key == config_key)
            .order_by(ConfigAuditLog.created_at.desc(), ConfigAuditLog.id.desc())
            .limit(limit)
        )
        return list((await self.session.execute(q)).scalars().all())
