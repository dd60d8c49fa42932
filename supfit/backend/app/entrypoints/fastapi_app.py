# app/entrypoints/fastapi_app.py
from __future__ import annotations

from typing import Sequence

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from ..db import AsyncSessionLocal, engine as default_engine
from ..models import Base
from ..service_layer.location import LocationResolver
from ..service_layer.location_strategies import LocationStrategy
from ..service_layer.matching import MatchingService
from ..service_layer.unit_of_work import SessionFactory
from ..service_layer.weights import WeightConfigStore
from .api.routers import health, jobs, location, matching, professionals, weights


def create_app(
    *,
    session_factory: SessionFactory | None = None,
    engine: AsyncEngine | None = None,
    strategies: Sequence[LocationStrategy] | None = None,
) -> FastAPI:
    app = FastAPI(title="SupFit - Matching & Ranking Engine")

    factory = session_factory or AsyncSessionLocal
    db_engine = engine or default_engine

    # One instance of each per process; the resolver owns the location cache.
    store = WeightConfigStore(factory)
    resolver = LocationResolver(session_factory=factory, strategies=strategies)
    app.state.session_factory = factory
    app.state.weights = store
    app.state.resolver = resolver
    app.state.matching = MatchingService(session_factory=factory, weights=store, resolver=resolver)

    @app.on_event("startup")
    async def _startup() -> None:
        # Single place where DB tables are created in dev.
        async with db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    # Routers
    app.include_router(health.router)
    app.include_router(matching.router)
    app.include_router(weights.router)
    app.include_router(location.router)
    app.include_router(professionals.router)
    app.include_router(jobs.router)

    return app
