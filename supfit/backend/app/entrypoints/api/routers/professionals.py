# app/entrypoints/api/routers/professionals.py
from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import db_session, require_api_key
from ....adapters.repos.professionals import ProfessionalRepository
from ....models import Professional, ProfessionalType
from ....schemas import ProfessionalIn, ProfessionalOut, ProfessionalTypeName

router = APIRouter(prefix="/professionals", tags=["professionals"])


def _out(p: Professional, created: bool | None = None) -> ProfessionalOut:
    return ProfessionalOut(
        id=p.id,
        name=p.name,
        professional_type=p.professional_type.value,
        specialties=json.loads(p.specialties_json or "[]"),
        price=p.price,
        rating=p.rating,
        review_count=p.review_count,
        has_open_slot=p.has_open_slot,
        created=created,
    )


@router.post("", response_model=ProfessionalOut, dependencies=[Depends(require_api_key)])
async def upsert_professional(
    body: ProfessionalIn,
    session: AsyncSession = Depends(db_session),
) -> ProfessionalOut:
    row, created = await ProfessionalRepository(session).upsert(body.model_dump())
    await session.commit()
    return _out(row, created)


@router.get("", response_model=list[ProfessionalOut])
async def list_professionals(
    professional_type: ProfessionalTypeName | None = Query(default=None),
    min_rating: float | None = Query(default=None, ge=0, le=5),
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(db_session),
) -> list[ProfessionalOut]:
    rows = await ProfessionalRepository(session).list_rows(
        professional_type=ProfessionalType(professional_type) if professional_type else None,
        min_rating=min_rating,
        limit=limit,
    )
    return [_out(r) for r in rows]
