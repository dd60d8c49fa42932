import pytest
from sqlalchemy import func, select

from app.models import Professional
from app.service_layer.demo_seed import DEMO_PROFESSIONALS, seed_demo


@pytest.mark.asyncio
async def test_seed_is_idempotent(async_session_maker):
    async with async_session_maker() as session:
        first = await seed_demo(session)
        await session.commit()

    async with async_session_maker() as session:
        second = await seed_demo(session)
        await session.commit()

    assert first == {"seeded": len(DEMO_PROFESSIONALS), "created": len(DEMO_PROFESSIONALS)}
    assert second["created"] == 0

    async with async_session_maker() as session:
        n = (await session.execute(select(func.count()).select_from(Professional))).scalar_one()
    assert n == len(DEMO_PROFESSIONALS)
