# app/entrypoints/api/routers/location.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import location_resolver
from ....domain.address import address_from_payload
from ....domain.types import GpsReading, LocationFix, LocationRequest
from ....schemas import ConsentOut, LocationFixOut, LocationRequestIn, RevokeOut
from ....service_layer.location import LocationResolver

router = APIRouter(prefix="/users/{user_id}/location", tags=["location"])


def _fix_out(fix: LocationFix) -> LocationFixOut:
    if not fix.is_known:
        return LocationFixOut(
            status="unavailable",
            source=fix.source.value,
            quality_score=fix.quality_score,
            quality_tier=fix.quality_tier.value,
        )
    return LocationFixOut(
        status="resolved",
        latitude=fix.latitude,
        longitude=fix.longitude,
        accuracy_meters=fix.accuracy_meters,
        source=fix.source.value,
        quality_score=fix.quality_score,
        quality_tier=fix.quality_tier.value,
        captured_at=fix.captured_at,
    )


@router.post("", response_model=LocationFixOut)
async def request_location(
    user_id: str,
    body: LocationRequestIn,
    resolver: LocationResolver = Depends(location_resolver),
) -> LocationFixOut:
    gps = None
    if body.gps is not None:
        gps = GpsReading(
            latitude=body.gps.latitude,
            longitude=body.gps.longitude,
            accuracy_meters=body.gps.accuracy_meters,
        )

    fix = await resolver.resolve(
        LocationRequest(
            user_id=user_id,
            allow_gps=body.allow_gps,
            capture_gps=body.capture_gps,
            gps=gps,
            address=address_from_payload(body.address),
            region=body.region,
            force_refresh=body.force_refresh,
            timeout_s=body.timeout_s,
        )
    )
    return _fix_out(fix)


@router.get("", response_model=LocationFixOut)
async def get_cached_location(
    user_id: str,
    resolver: LocationResolver = Depends(location_resolver),
) -> LocationFixOut:
    return _fix_out(await resolver.cached(user_id) or LocationFix.unavailable())


@router.post("/consent", response_model=ConsentOut)
async def grant_gps(
    user_id: str,
    resolver: LocationResolver = Depends(location_resolver),
) -> ConsentOut:
    await resolver.grant_gps_permission(user_id)
    return ConsentOut(user_id=user_id, gps_granted=True)


@router.delete("", response_model=RevokeOut)
async def revoke_location(
    user_id: str,
    resolver: LocationResolver = Depends(location_resolver),
) -> RevokeOut:
    await resolver.revoke(user_id)
    return RevokeOut(user_id=user_id, revoked=True)
