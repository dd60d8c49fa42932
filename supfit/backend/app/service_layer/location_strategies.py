# app/service_layer/location_strategies.py
from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ..adapters.centroids import CentroidDirectory
from ..adapters.clients.geocoding import Geocoder
from ..domain.location import fix_from_gps, make_fix, valid_coordinates
from ..domain.types import GpsReading, LocationRequest, LocationSource, StrategyOutcome

log = logging.getLogger(__name__)


class LocationStrategy(Protocol):
    name: str

    async def attempt(self, request: LocationRequest, *, timeout_s: float) -> StrategyOutcome:
        ...


class DeviceLocationProvider(Protocol):
    async def read(self, request: LocationRequest) -> GpsReading | None:
        ...


class ReportedGpsProvider:
    """
    The device sensor lives on the client; the reading arrives with the request.
    """

    async def read(self, request: LocationRequest) -> GpsReading | None:
        return request.gps


class GpsStrategy:
    name = "gps"

    def __init__(self, provider: DeviceLocationProvider | None = None) -> None:
        self.provider = provider or ReportedGpsProvider()

    async def attempt(self, request: LocationRequest, *, timeout_s: float) -> StrategyOutcome:
        # permission denial is a terminal state for this branch, not an error
        if not request.allow_gps:
            return StrategyOutcome(reason="gps_permission_denied")
        if not request.capture_gps:
            return StrategyOutcome(reason="gps_not_requested")

        try:
            reading = await asyncio.wait_for(self.provider.read(request), timeout=timeout_s)
        except asyncio.TimeoutError:
            return StrategyOutcome(reason="gps_timeout")
        except Exception as e:
            log.warning("gps read failed: %s", type(e).__name__)
            return StrategyOutcome(reason=f"gps_error:{type(e).__name__}")

        if reading is None:
            return StrategyOutcome(reason="gps_no_fix")
        if not valid_coordinates(reading.latitude, reading.longitude):
            return StrategyOutcome(reason="gps_invalid_coordinates")
        return StrategyOutcome(fix=fix_from_gps(reading))


class AddressStrategy:
    name = "address"

    def __init__(self, geocoder: Geocoder) -> None:
        self.geocoder = geocoder

    async def attempt(self, request: LocationRequest, *, timeout_s: float) -> StrategyOutcome:
        addr = request.address
        if addr is None:
            return StrategyOutcome(reason="address_missing")
        if not addr.is_complete():
            return StrategyOutcome(reason="address_incomplete")

        try:
            res = await asyncio.wait_for(self.geocoder.geocode(addr, timeout_s=timeout_s), timeout=timeout_s)
        except asyncio.TimeoutError:
            return StrategyOutcome(reason="geocoder_timeout")
        except Exception as e:
            log.warning("geocoder raised: %s", type(e).__name__)
            return StrategyOutcome(reason=f"geocoder_error:{type(e).__name__}")

        if not res.ok:
            return StrategyOutcome(reason=f"address_unresolved:{res.source}")

        return StrategyOutcome(
            fix=make_fix(
                latitude=res.latitude,  # type: ignore[arg-type]
                longitude=res.longitude,  # type: ignore[arg-type]
                source=LocationSource.address,
                accuracy_meters=res.accuracy_meters,
            )
        )


class CentroidStrategy:
    name = "centroid"

    def __init__(self, directory: CentroidDirectory | None = None) -> None:
        self.directory = directory or CentroidDirectory()

    async def attempt(self, request: LocationRequest, *, timeout_s: float) -> StrategyOutcome:
        region = request.region
        if not region and request.address is not None:
            region = request.address.city
        if not region:
            return StrategyOutcome(reason="region_missing")

        hit = self.directory.lookup(region)
        if hit is None:
            return StrategyOutcome(reason="centroid_unknown")

        lat, lon = hit
        return StrategyOutcome(fix=make_fix(latitude=lat, longitude=lon, source=LocationSource.centroid))
