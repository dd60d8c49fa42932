# scripts/run_scheduler.py
from __future__ import annotations

import argparse
import asyncio
import logging

from app.jobs.scheduler import build_scheduler, scheduled_location_purge

log = logging.getLogger("supfit.scheduler")


async def main(once: bool) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    for noisy in ("httpx", "apscheduler"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if once:
        await scheduled_location_purge()
        return

    scheduler = build_scheduler()
    scheduler.start()
    log.info("scheduler started jobs=%s", [j.id for j in scheduler.get_jobs()])
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        log.info("scheduler stopped")


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Run SupFit background jobs.")
    ap.add_argument("--once", action="store_true", help="run the location purge once and exit")
    args = ap.parse_args()
    try:
        asyncio.run(main(args.once))
    except KeyboardInterrupt:
        pass
