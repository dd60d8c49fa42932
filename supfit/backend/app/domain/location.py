# app/domain/location.py
from __future__ import annotations

import math
from datetime import datetime

from .types import GpsReading, LocationFix, LocationSource, QualityTier

EARTH_RADIUS_KM = 6371.0088

# Base quality per source. GPS decays from its max toward GPS_FLOOR with accuracy,
# which still keeps every GPS fix >= any address fix >= any centroid fix.
SOURCE_BASE_SCORES: dict[LocationSource, float] = {
    LocationSource.gps: 100.0,
    LocationSource.address: 85.0,
    LocationSource.centroid: 50.0,
    LocationSource.unknown: 0.0,
}

# a GPS fix never scores below an address fix
GPS_FLOOR = SOURCE_BASE_SCORES[LocationSource.address]
GPS_BEST_ACCURACY_M = 20.0
GPS_WORST_ACCURACY_M = 200.0


def gps_quality_score(accuracy_meters: float | None) -> float:
    """
    100 at <= 20m, linear down to GPS_FLOOR (85) at >= 200m.
    Unknown accuracy is treated as the worst case.
    """
    if accuracy_meters is None:
        return GPS_FLOOR
    acc = max(0.0, float(accuracy_meters))
    if acc <= GPS_BEST_ACCURACY_M:
        return SOURCE_BASE_SCORES[LocationSource.gps]
    if acc >= GPS_WORST_ACCURACY_M:
        return GPS_FLOOR
    span = GPS_WORST_ACCURACY_M - GPS_BEST_ACCURACY_M
    frac = (acc - GPS_BEST_ACCURACY_M) / span
    return SOURCE_BASE_SCORES[LocationSource.gps] - frac * (SOURCE_BASE_SCORES[LocationSource.gps] - GPS_FLOOR)


def quality_tier(score: float) -> QualityTier:
    if score >= 90:
        return QualityTier.high
    if score >= 70:
        return QualityTier.medium
    if score >= 40:
        return QualityTier.low
    return QualityTier.unavailable


def make_fix(
    *,
    latitude: float,
    longitude: float,
    source: LocationSource,
    accuracy_meters: float | None = None,
    captured_at: datetime | None = None,
) -> LocationFix:
    if source == LocationSource.gps:
        score = gps_quality_score(accuracy_meters)
    else:
        score = SOURCE_BASE_SCORES[source]

    kwargs = {}
    if captured_at is not None:
        kwargs["captured_at"] = captured_at

    return LocationFix(
        latitude=float(latitude),
        longitude=float(longitude),
        source=source,
        quality_score=score,
        quality_tier=quality_tier(score),
        accuracy_meters=accuracy_meters,
        **kwargs,
    )


def fix_from_gps(reading: GpsReading) -> LocationFix:
    return make_fix(
        latitude=reading.latitude,
        longitude=reading.longitude,
        source=LocationSource.gps,
        accuracy_meters=reading.accuracy_meters,
    )


def valid_coordinates(lat: float | None, lon: float | None) -> bool:
    if lat is None or lon is None:
        return False
    if math.isnan(lat) or math.isnan(lon):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km."""
    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dp = p2 - p1
    dl = math.radians(lon2 - lon1)
    a = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def distance_km(a: LocationFix, b: LocationFix) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def bounds_accuracy_m(bounds: dict | None) -> float | None:
    """
    Rough accuracy for a geocoder viewport/bounds: half the diagonal, in meters.
    """
    if not bounds:
        return None
    ne = bounds.get("northeast") or {}
    sw = bounds.get("southwest") or {}
    try:
        diag_km = haversine_km(float(sw["lat"]), float(sw["lng"]), float(ne["lat"]), float(ne["lng"]))
    except (KeyError, TypeError, ValueError):
        return None
    return round(diag_km * 1000.0 / 2.0)
