# app/adapters/repos/professionals.py
from __future__ import annotations

import json
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.location import make_fix, valid_coordinates
from ...domain.parsing import normalize_categories
from ...domain.types import Candidate, LocationSource
from ...models import Professional, ProfessionalType, utcnow


def _load_list(raw: str | None) -> list[str]:
    try:
        data = json.loads(raw or "[]")
    except ValueError:
        return []
    return [str(x) for x in data] if isinstance(data, list) else []


def row_to_candidate(row: Professional) -> Candidate:
    fix = None
    if valid_coordinates(row.lat, row.lon):
        fix = make_fix(
            latitude=row.lat,  # type: ignore[arg-type]
            longitude=row.lon,  # type: ignore[arg-type]
            source=row.location_source or LocationSource.address,
        )
    return Candidate(
        id=row.id,
        specialties=normalize_categories(_load_list(row.specialties_json)),
        price_value=float(row.price or 0.0),
        rating_value=float(row.rating or 0.0),
        review_count=int(row.review_count or 0),
        available_modes=normalize_categories(_load_list(row.modes_json)),
        available_timings=normalize_categories(_load_list(row.timings_json)),
        location_fix=fix,
        has_open_slot=bool(row.has_open_slot),
    )


class ProfessionalRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(self, payload: dict[str, Any]) -> tuple[Professional, bool]:
        """
        Upsert by id. Returns (row, was_created).
        """
        pid = str(payload["id"])
        row = await self.session.get(Professional, pid)

        was_created = False
        if row is None:
            row = Professional(id=pid)
            self.session.add(row)
            was_created = True

        row.name = str(payload.get("name") or pid)
        row.professional_type = ProfessionalType(payload.get("professional_type") or ProfessionalType.coach.value)
        row.specialties_json = json.dumps(sorted(normalize_categories(payload.get("specialties"))))
        row.modes_json = json.dumps(sorted(normalize_categories(payload.get("modes"))))
        row.timings_json = json.dumps(sorted(normalize_categories(payload.get("timings"))))
        row.price = float(payload.get("price") or 0.0)
        row.rating = float(payload.get("rating") or 0.0)
        row.review_count = int(payload.get("review_count") or 0)
        row.has_open_slot = bool(payload.get("has_open_slot", False))
        row.lat = payload.get("lat")
        row.lon = payload.get("lon")
        src = payload.get("location_source")
        row.location_source = LocationSource(src) if src else None
        row.updated_at = utcnow()

        await self.session.flush()
        return row, was_created

    async def list_rows(
        self,
        *,
        professional_type: ProfessionalType | None = None,
        min_rating: float | None = None,
        limit: int | None = None,
    ) -> list[Professional]:
        """No limit returns every matching row."""
        q = select(Professional).order_by(Professional.id.asc())
        if limit is not None:
            q = q.limit(limit)
        if professional_type is not None:
            q = q.where(Professional.professional_type == professional_type)
        if min_rating is not None:
            q = q.where(Professional.rating >= float(min_rating))
        return list((await self.session.execute(q)).scalars().all())

    async def list_candidates(self, **kwargs: Any) -> list[Candidate]:
        return [row_to_candidate(r) for r in await self.list_rows(**kwargs)]
