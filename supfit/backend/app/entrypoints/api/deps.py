# app/entrypoints/api/deps.py
from __future__ import annotations

from typing import AsyncIterator

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...service_layer.location import LocationResolver
from ...service_layer.matching import MatchingService
from ...service_layer.weights import WeightConfigStore


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if settings.API_KEY:
        if not x_api_key or x_api_key != settings.API_KEY:
            raise HTTPException(status_code=401, detail="Invalid API key")


# Services are built once in create_app() and live on app.state.

def weight_store(request: Request) -> WeightConfigStore:
    return request.app.state.weights


def location_resolver(request: Request) -> LocationResolver:
    return request.app.state.resolver


def matching_service(request: Request) -> MatchingService:
    return request.app.state.matching


async def db_session(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Yields a session from the factory the app was built with.
    """
    async with request.app.state.session_factory() as session:
        yield session
