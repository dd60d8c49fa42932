from __future__ import annotations

import argparse
import asyncio

from app.db import async_session_maker, engine
from app.models import Base
from app.service_layer.demo_seed import seed_demo
from app.service_layer.weights import WeightConfigStore


async def _ensure_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset-weights", action="store_true", help="Also reset signal weights to defaults")
    parser.add_argument("--actor", default="seed_script", help="Actor id recorded in the weight change log")
    args = parser.parse_args()

    await _ensure_schema()

    async with async_session_maker() as session:
        res = await seed_demo(session)
        await session.commit()

    if args.reset_weights:
        out = await WeightConfigStore(async_session_maker).reset_to_default(args.actor, "demo seed")
        print(f"Weights reset. audited={out.audited}")

    print(f"Seeded demo professionals. {res}")


if __name__ == "__main__":
    asyncio.run(main())
