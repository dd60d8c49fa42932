# app/adapters/clients/geocoding.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from ...config import settings
from ...domain.location import bounds_accuracy_m, valid_coordinates
from ...domain.parsing import get_nested, to_float
from ...domain.types import StructuredAddress
from .http_resilience import resilient_request

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float | None
    longitude: float | None
    source: str
    accuracy_meters: float | None = None
    raw: Any | None = None

    @property
    def ok(self) -> bool:
        return valid_coordinates(self.latitude, self.longitude)


class Geocoder(Protocol):
    async def geocode(self, address: StructuredAddress, *, timeout_s: float | None = None) -> GeocodeResult:
        ...


class GoogleGeocoder:
    """
    Structured address -> lat/lng via the Google Geocoding JSON API.

    Never raises for provider-side problems; returns a GeocodeResult whose
    `source` says what happened (disabled, zero_results, geocoder_error:<Type>).
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        default_country: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.GEOCODING_API_KEY
        self.base_url = base_url or settings.GEOCODING_BASE_URL
        self.default_country = default_country or settings.GEOCODING_DEFAULT_COUNTRY
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "GoogleGeocoder":
        return cls()

    async def geocode(self, address: StructuredAddress, *, timeout_s: float | None = None) -> GeocodeResult:
        if not self.api_key:
            return GeocodeResult(None, None, source="disabled")

        params = {"address": address.one_line(self.default_country), "key": self.api_key}

        try:
            r = await resilient_request(
                "GET",
                self.base_url,
                params=params,
                headers={"accept": "application/json"},
                timeout_s=timeout_s,
                transport=self.transport,
            )
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("geocoder request failed: %s", type(e).__name__)
            return GeocodeResult(None, None, source=f"geocoder_error:{type(e).__name__}")

        if not isinstance(data, dict):
            return GeocodeResult(None, None, source="geocoder_error:bad_payload")

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            return GeocodeResult(None, None, source=f"geocoder_status:{status or 'unknown'}".lower(), raw=data)

        first = results[0] if isinstance(results[0], dict) else {}
        lat = to_float(get_nested(first, "geometry.location.lat"))
        lng = to_float(get_nested(first, "geometry.location.lng"))
        acc = bounds_accuracy_m(get_nested(first, "geometry.bounds")) or 100.0

        return GeocodeResult(lat, lng, source="google", accuracy_meters=acc, raw=first)
