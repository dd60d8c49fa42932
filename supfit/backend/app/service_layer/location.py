# app/service_layer/location.py
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Sequence

from ..adapters.centroids import CentroidDirectory
from ..adapters.clients.geocoding import Geocoder, GoogleGeocoder
from ..config import settings
from ..domain.types import LocationFix, LocationRequest
from ..models import AuditAction, utcnow
from .audit import audit_event
from .location_strategies import (
    AddressStrategy,
    CentroidStrategy,
    DeviceLocationProvider,
    GpsStrategy,
    LocationStrategy,
)
from .unit_of_work import SessionFactory, SqlAlchemyUnitOfWork

log = logging.getLogger(__name__)

LOCATION_TABLE = "location_cache"


class LocationFixCache:
    """
    Per-user LocationFix cache backed by the location_cache table.

    Owned by a LocationResolver; one instance per process. Every write is a
    whole-row upsert in its own transaction, so readers never see half a fix.
    """

    def __init__(self, session_factory: SessionFactory | None = None, *, ttl_days: int | None = None) -> None:
        self.session_factory = session_factory
        self.ttl = timedelta(days=int(ttl_days if ttl_days is not None else settings.LOCATION_CACHE_TTL_DAYS))

    async def get(self, user_id: str, *, now: datetime | None = None) -> LocationFix | None:
        async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
            return await uow.repos.locations.get_fresh_fix(user_id, now=now or utcnow())

    async def put(self, user_id: str, fix: LocationFix, *, now: datetime | None = None) -> AuditAction:
        """Returns create|update depending on whether a row existed."""
        now = now or utcnow()
        async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
            existed = await uow.repos.locations.get_entry(user_id) is not None
            await uow.repos.locations.upsert_fix(user_id, fix, expires_at=now + self.ttl)
        return AuditAction.update if existed else AuditAction.create

    async def invalidate(self, user_id: str) -> int:
        async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
            return await uow.repos.locations.delete_fix(user_id)

    async def purge_expired(self, *, now: datetime | None = None) -> int:
        async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
            return await uow.repos.locations.purge_expired(now=now or utcnow())


def default_strategies(
    *,
    geocoder: Geocoder | None = None,
    device: DeviceLocationProvider | None = None,
    centroids: CentroidDirectory | None = None,
) -> list[LocationStrategy]:
    # precedence order: GPS -> address -> centroid
    return [
        GpsStrategy(device),
        AddressStrategy(geocoder or GoogleGeocoder.from_settings()),
        CentroidStrategy(centroids),
    ]


class LocationResolver:
    """
    Best-effort location fix for a user: cache -> GPS -> address -> centroid,
    else an explicit UNKNOWN/unavailable fix. Never raises for provider
    problems; those just move the chain to the next step.
    """

    def __init__(
        self,
        *,
        session_factory: SessionFactory | None = None,
        strategies: Sequence[LocationStrategy] | None = None,
        cache: LocationFixCache | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.strategies: list[LocationStrategy] = list(strategies) if strategies is not None else default_strategies()
        self.cache = cache or LocationFixCache(session_factory)
        self.timeout_s = float(timeout_s if timeout_s is not None else settings.LOCATION_TIMEOUT_S)

    async def cached(self, user_id: str) -> LocationFix | None:
        return await self.cache.get(user_id)

    async def resolve(self, request: LocationRequest) -> LocationFix:
        if not request.force_refresh:
            try:
                hit = await self.cache.get(request.user_id)
            except Exception as e:
                log.warning("location cache read failed user=%s err=%s", request.user_id, type(e).__name__)
                hit = None
            if hit is not None:
                log.debug("location cache hit user=%s source=%s", request.user_id, hit.source.value)
                return hit

        effective = await self._apply_permission(request)
        timeout_s = float(request.timeout_s if request.timeout_s is not None else self.timeout_s)

        reasons: list[str] = []
        for strategy in self.strategies:
            outcome = await strategy.attempt(effective, timeout_s=timeout_s)
            if outcome.fix is not None:
                log.info(
                    "location resolved user=%s source=%s tier=%s skipped=%s",
                    request.user_id,
                    outcome.fix.source.value,
                    outcome.fix.quality_tier.value,
                    ",".join(reasons) or "-",
                )
                await self._remember(request.user_id, outcome.fix)
                return outcome.fix
            log.debug("location step skipped user=%s step=%s reason=%s", request.user_id, strategy.name, outcome.reason)
            reasons.append(outcome.reason or f"{strategy.name}_failed")

        log.info("location unavailable user=%s reasons=%s", request.user_id, ",".join(reasons))
        return LocationFix.unavailable()

    async def grant_gps_permission(self, user_id: str) -> None:
        async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
            await uow.repos.locations.store_gps_grant(user_id)
        await audit_event(
            self.session_factory,
            action=AuditAction.create,
            table="location_consent",
            user_id=user_id,
            metadata={"permission": "gps"},
        )

    async def revoke(self, user_id: str) -> None:
        """
        Clear cached fix and stored GPS grant. Idempotent: revoking with
        nothing stored succeeds the same way.
        """
        async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
            fixes = await uow.repos.locations.delete_fix(user_id)
            grants = await uow.repos.locations.delete_gps_grant(user_id)

        await audit_event(
            self.session_factory,
            action=AuditAction.delete,
            table=LOCATION_TABLE,
            user_id=user_id,
            metadata={"cleared_fix": bool(fixes), "cleared_grant": bool(grants)},
        )

    async def purge_expired(self) -> int:
        return await self.cache.purge_expired()

    async def _apply_permission(self, request: LocationRequest) -> LocationRequest:
        if request.allow_gps:
            # an explicit grant on this call is remembered until revoked
            try:
                await self.grant_gps_permission(request.user_id)
            except Exception as e:
                log.warning("could not store gps grant user=%s err=%s", request.user_id, type(e).__name__)
            return request

        try:
            async with SqlAlchemyUnitOfWork(self.session_factory) as uow:
                granted = await uow.repos.locations.has_gps_grant(request.user_id)
        except Exception as e:
            log.warning("could not read gps grant user=%s err=%s", request.user_id, type(e).__name__)
            granted = False
        return replace(request, allow_gps=granted)

    async def _remember(self, user_id: str, fix: LocationFix) -> None:
        try:
            action = await self.cache.put(user_id, fix)
        except Exception as e:
            log.warning("location cache write failed user=%s err=%s", user_id, type(e).__name__)
            return

        await audit_event(
            self.session_factory,
            action=action,
            table=LOCATION_TABLE,
            user_id=user_id,
            metadata={
                "source": fix.source.value,
                "quality_score": fix.quality_score,
                "quality_tier": fix.quality_tier.value,
            },
        )
