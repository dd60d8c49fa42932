# app/jobs/scheduler.py
from __future__ import annotations

import logging
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..db import async_session
from ..service_layer.jobruns import record_summary, tracked_run
from ..service_layer.location import LocationFixCache

log = logging.getLogger(__name__)

LOCATION_PURGE_JOB = "location_purge"


async def run_location_purge(
    session: AsyncSession,
    cache: LocationFixCache,
    *,
    job_name: str = LOCATION_PURGE_JOB,
) -> dict[str, Any]:
    """
    Delete location fixes past their TTL, recorded as a JobRun on `session`.
    """
    async with tracked_run(session, job_name, meta={"ttl_days": cache.ttl.days}) as jr:
        purged = await cache.purge_expired()
        summary = {"purged": purged}
        record_summary(jr, summary)

    log.info("location purge done job=%s purged=%d", job_name, purged)
    return summary


async def scheduled_location_purge() -> None:
    async with async_session() as session:
        await run_location_purge(session, LocationFixCache())


def build_scheduler() -> AsyncIOScheduler:
    sched = AsyncIOScheduler()
    sched.add_job(
        scheduled_location_purge,
        "interval",
        minutes=int(settings.SCHED_LOCATION_PURGE_INTERVAL_MINUTES),
        id=LOCATION_PURGE_JOB,
        max_instances=1,
        coalesce=True,
    )
    return sched
