# app/entrypoints/api/routers/jobs.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import db_session, location_resolver, require_api_key
from ....jobs.scheduler import run_location_purge
from ....schemas import JobResult
from ....service_layer.location import LocationResolver

router = APIRouter(tags=["jobs"])


@router.post("/jobs/purge-locations", response_model=JobResult, dependencies=[Depends(require_api_key)])
async def jobs_purge_locations(
    session: AsyncSession = Depends(db_session),
    resolver: LocationResolver = Depends(location_resolver),
) -> JobResult:
    res = await run_location_purge(session, resolver.cache, job_name="location_purge_api")
    return JobResult(**res)
