import pytest

from app.adapters.repos.professionals import ProfessionalRepository
from app.service_layer.matching import MatchingService, SearchFilters

from factories import PUNE


async def seed_catalogue(session_factory, filler=500):
    # filler ids sort ahead of the strong candidate
    async with session_factory() as s:
        repo = ProfessionalRepository(s)
        for i in range(filler):
            await repo.upsert(
                {
                    "id": f"a{i:04d}",
                    "professional_type": "yoga",
                    "specialties": ["yoga"],
                    "price": 1000,
                    "rating": 1.0,
                    "review_count": 10,
                }
            )
        await repo.upsert(
            {
                "id": "zz-best",
                "professional_type": "coach",
                "specialties": ["weight loss"],
                "price": 500,
                "rating": 5.0,
                "review_count": 50,
                "has_open_slot": True,
                "lat": PUNE[0],
                "lon": PUNE[1],
                "location_source": "address",
            }
        )
        await s.commit()


@pytest.mark.asyncio
async def test_repository_lists_whole_catalogue_without_limit(async_session_maker):
    await seed_catalogue(async_session_maker)
    async with async_session_maker() as s:
        repo = ProfessionalRepository(s)
        assert len(await repo.list_rows()) == 501
        assert len(await repo.list_rows(limit=20)) == 20


@pytest.mark.asyncio
async def test_search_sees_candidates_past_first_five_hundred(async_session_maker):
    await seed_catalogue(async_session_maker)
    service = MatchingService(session_factory=async_session_maker)

    res = await service.search("u1", ["weight loss"], SearchFilters(max_price=1000), limit=5)

    assert res
    assert res[0].candidate_id == "zz-best"
    assert res[0].rank == 1
