# app/service_layer/matching.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ..config import settings
from ..domain.parsing import normalize_categories
from ..domain.policies import validate_criteria
from ..domain.ranking import rank
from ..domain.types import Candidate, LocationFix, MatchResult, SearchCriteria
from ..models import ProfessionalType
from .location import LocationResolver
from .unit_of_work import SessionFactory, SqlAlchemyUnitOfWork
from .weights import WeightConfigStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchFilters:
    modes: Iterable[str] = field(default_factory=tuple)
    timings: Iterable[str] = field(default_factory=tuple)
    min_rating: float | None = None
    max_price: float | None = None


def build_criteria(
    goal_categories: Iterable[str],
    filters: SearchFilters | None,
    *,
    origin: LocationFix | None,
    radius_km: float | None,
    limit: int | None,
) -> SearchCriteria:
    f = filters or SearchFilters()
    lim = int(limit if limit is not None else settings.DEFAULT_RESULT_LIMIT)
    return SearchCriteria(
        goal_categories=normalize_categories(list(goal_categories or [])),
        modes=normalize_categories(list(f.modes or [])),
        timings=normalize_categories(list(f.timings or [])),
        min_rating=f.min_rating,
        max_price=f.max_price,
        origin_location=origin,
        radius_km=float(radius_km if radius_km is not None else settings.DEFAULT_RADIUS_KM),
        result_limit=min(lim, int(settings.MAX_RESULT_LIMIT)),
    )


class MatchingService:
    """
    Search entry point: user goals + filters -> ranked professionals.

    Location comes from the resolver's cache only (no device/network calls
    on the search path); weights are read once per search.
    """

    def __init__(
        self,
        *,
        session_factory: SessionFactory | None = None,
        weights: WeightConfigStore | None = None,
        resolver: LocationResolver | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.weights = weights or WeightConfigStore(session_factory)
        self.resolver = resolver or LocationResolver(session_factory=session_factory)

    async def search(
        self,
        user_id: str,
        goal_categories: Iterable[str],
        filters: SearchFilters | None = None,
        *,
        radius_km: float | None = None,
        limit: int | None = None,
        professional_type: ProfessionalType | None = None,
        origin: LocationFix | None = None,
    ) -> list[MatchResult]:
        # validate before any I/O
        validate_criteria(build_criteria(goal_categories, filters, origin=None, radius_km=radius_km, limit=limit))

        if origin is None:
            origin = await self.resolver.cached(user_id) or LocationFix.unavailable()

        criteria = build_criteria(goal_categories, filters, origin=origin, radius_km=radius_km, limit=limit)

        snapshot = await self.weights.get()
        candidates = await self._load_candidates(criteria, professional_type)
        results = rank(criteria, candidates, snapshot)

        log.info(
            "search user=%s goals=%d candidates=%d results=%d location=%s",
            user_id,
            len(criteria.goal_categories),
            len(candidates),
            len(results),
            origin.source.value,
        )

        if settings.MATCH_SNAPSHOT_LOG_ENABLED:
            await self._log_snapshot(user_id, results, origin)
        return results

    async def _load_candidates(
        self,
        criteria: SearchCriteria,
        professional_type: ProfessionalType | None,
    ) -> list[Candidate]:
        async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
            return await uow.repos.professionals.list_candidates(
                professional_type=professional_type,
                min_rating=criteria.min_rating,
                limit=None,
            )

    async def _log_snapshot(self, user_id: str, results: list[MatchResult], origin: LocationFix) -> None:
        try:
            async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
                await uow.repos.audit.append_match_snapshot(
                    user_id=user_id,
                    value=len(results),
                    reasoning={
                        "top_match_score": results[0].composite_score if results else 0,
                        "total_matches": len(results),
                        "location_source": origin.source.value,
                    },
                )
        except Exception as e:
            log.warning("match snapshot log failed user=%s err=%s", user_id, type(e).__name__)
