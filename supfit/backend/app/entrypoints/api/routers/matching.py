# app/entrypoints/api/routers/matching.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import matching_service
from ....domain.errors import InvalidSearchCriteria
from ....models import ProfessionalType
from ....schemas import MatchOut, SearchRequest
from ....service_layer.matching import MatchingService, SearchFilters

router = APIRouter(tags=["matching"])


@router.post("/match/search", response_model=list[MatchOut])
async def search(
    body: SearchRequest,
    service: MatchingService = Depends(matching_service),
) -> list[MatchOut]:
    try:
        results = await service.search(
            body.user_id,
            body.goal_categories,
            SearchFilters(
                modes=body.filters.modes,
                timings=body.filters.timings,
                min_rating=body.filters.min_rating,
                max_price=body.filters.max_price,
            ),
            radius_km=body.radius_km,
            limit=body.limit,
            professional_type=ProfessionalType(body.professional_type) if body.professional_type else None,
        )
    except InvalidSearchCriteria as e:
        raise HTTPException(status_code=422, detail=str(e))

    return [
        MatchOut(
            candidate_id=r.candidate_id,
            composite_score=r.composite_score,
            rank=r.rank,
            match_label=r.match_label,
            per_signal_score=r.per_signal_score,
            explain=r.explain,
        )
        for r in results
    ]
