# app/entrypoints/api/routers/health.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text

from ..deps import require_api_key
from ....adapters.clients.http_resilience import circuit_snapshot
from ....config import settings

log = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _mask(secret: str | None) -> str | None:
    if not secret:
        return secret
    return "***" if len(secret) <= 8 else f"{secret[:3]}***{secret[-2:]}"


@router.get("/health")
async def health(request: Request) -> dict[str, str]:
    db = "ok"
    try:
        async with request.app.state.session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        log.warning("health db probe failed: %s", type(e).__name__)
        db = "unreachable"
    return {"status": "ok" if db == "ok" else "degraded", "db": db}


@router.get("/debug/config", dependencies=[Depends(require_api_key)])
def debug_config() -> dict[str, Any]:
    return {
        "ENV": settings.ENV,
        "SUPFIT_DB_URL": settings.SUPFIT_DB_URL,
        "GEOCODING_BASE_URL": settings.GEOCODING_BASE_URL,
        "GEOCODING_API_KEY": _mask(settings.GEOCODING_API_KEY),
        "LOCATION_CACHE_TTL_DAYS": settings.LOCATION_CACHE_TTL_DAYS,
        "LOCATION_TIMEOUT_S": settings.LOCATION_TIMEOUT_S,
        "DEFAULT_RADIUS_KM": settings.DEFAULT_RADIUS_KM,
        "AUDIT_ENABLED": settings.AUDIT_ENABLED,
        "circuits": circuit_snapshot(),
    }
