# app/service_layer/audit.py
from __future__ import annotations

import logging
from typing import Any

from ..config import settings
from ..models import AuditAction
from .unit_of_work import SessionFactory, SqlAlchemyUnitOfWork

log = logging.getLogger(__name__)


async def audit_event(
    session_factory: SessionFactory | None,
    *,
    action: AuditAction,
    table: str,
    user_id: str | None,
    metadata: dict[str, Any] | None = None,
    purpose: str | None = None,
) -> bool:
    """
    Append-only audit write in its own transaction.
    Returns False (and logs) when the write fails; audit never blocks the main flow.
    """
    if not settings.AUDIT_ENABLED:
        return False
    try:
        async with SqlAlchemyUnitOfWork(session_factory) as uow:
            await uow.repos.audit.append(
                action=action,
                table=table,
                user_id=user_id,
                metadata=metadata,
                purpose=purpose,
            )
        return True
    except Exception as e:
        # keys only; values may be sensitive
        log.warning(
            "audit write failed action=%s table=%s keys=%s err=%s",
            action.value,
            table,
            sorted((metadata or {}).keys()),
            type(e).__name__,
        )
        return False
