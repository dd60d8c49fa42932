# app/service_layer/demo_seed.py
from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.repos.professionals import ProfessionalRepository

DEMO_PROFESSIONALS: list[dict[str, Any]] = [
    {
        "id": "coach-aarav",
        "name": "Aarav Mehta",
        "professional_type": "coach",
        "specialties": ["Weight Loss", "Strength Training"],
        "modes": ["in-person", "online"],
        "timings": ["morning", "evening"],
        "price": 2500,
        "rating": 4.7,
        "review_count": 42,
        "has_open_slot": True,
        "lat": 18.5362,
        "lon": 73.8939,
        "location_source": "address",
    },
    {
        "id": "coach-isha",
        "name": "Isha Kapoor",
        "professional_type": "coach",
        "specialties": ["Muscle Gain", "Strength Training", "Endurance"],
        "modes": ["in-person"],
        "timings": ["morning"],
        "price": 4000,
        "rating": 4.9,
        "review_count": 3,
        "has_open_slot": True,
        "lat": 18.5204,
        "lon": 73.8567,
        "location_source": "address",
    },
    {
        "id": "diet-rohan",
        "name": "Rohan Iyer",
        "professional_type": "dietician",
        "specialties": ["Nutrition", "Weight Loss", "Medical"],
        "modes": ["online"],
        "timings": ["afternoon", "evening"],
        "price": 1500,
        "rating": 4.4,
        "review_count": 18,
        "has_open_slot": False,
        "lat": None,
        "lon": None,
        "location_source": None,
    },
]


async def seed_demo(session: AsyncSession) -> dict[str, Any]:
    """
    Idempotent demo seed:
    - creates/updates a handful of professionals around Pune
    - safe to run multiple times
    """
    repo = ProfessionalRepository(session)
    created = 0
    for payload in DEMO_PROFESSIONALS:
        _, was_created = await repo.upsert(payload)
        created += int(was_created)
    return {"seeded": len(DEMO_PROFESSIONALS), "created": created}
