from __future__ import annotations

import argparse
import asyncio

from app.db import async_session_maker
from app.service_layer.matching import MatchingService, SearchFilters


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--user", default="demo-user")
    parser.add_argument("--goal", action="append", default=[], help="Goal category (repeatable)")
    parser.add_argument("--max-price", type=float, default=None)
    parser.add_argument("--radius-km", type=float, default=None)
    parser.add_argument("--limit", type=int, default=10)
    args = parser.parse_args()

    svc = MatchingService(session_factory=async_session_maker)
    results = await svc.search(
        args.user,
        args.goal or ["weight loss"],
        SearchFilters(max_price=args.max_price),
        radius_km=args.radius_km,
        limit=args.limit,
    )
    for r in results:
        print(f"#{r.rank} {r.candidate_id} score={r.composite_score} [{r.match_label}] {r.explain}")


if __name__ == "__main__":
    asyncio.run(main())
