# app/service_layer/jobruns.py
from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import JobRun, JobRunStatus, utcnow


def record_summary(jr: JobRun, summary: dict[str, Any]) -> None:
    jr.summary_json = json.dumps(summary, sort_keys=True)


@asynccontextmanager
async def tracked_run(
    session: AsyncSession,
    job_name: str,
    meta: dict[str, Any] | None = None,
) -> AsyncIterator[JobRun]:
    """
    Persist a JobRun around a block of work.

    The running row is committed before the block starts so a crashed
    process still leaves a trace; the final status is committed on exit
    and any exception is re-raised after being recorded.
    """
    jr = JobRun(
        job_name=job_name,
        started_at=utcnow(),
        status=JobRunStatus.running,
        meta_json=json.dumps(meta or {}, sort_keys=True),
    )
    session.add(jr)
    await session.commit()

    try:
        yield jr
    except Exception as e:
        jr.status = JobRunStatus.failed
        jr.finished_at = utcnow()
        jr.error = f"{type(e).__name__}: {e}"
        await session.commit()
        raise

    jr.status = JobRunStatus.success
    jr.finished_at = utcnow()
    jr.error = None
    await session.commit()
