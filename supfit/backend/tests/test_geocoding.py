import httpx
import pytest

from app.adapters.clients.geocoding import GoogleGeocoder
from app.config import settings
from app.domain.types import StructuredAddress

ADDR = StructuredAddress(line1="12 FC Road", city="Pune", state="MH", postal="411004")


def google_ok(lat=18.5236, lng=73.8478, bounds=None):
    geometry = {"location": {"lat": lat, "lng": lng}}
    if bounds:
        geometry["bounds"] = bounds
    return {"status": "OK", "results": [{"geometry": geometry, "formatted_address": "FC Road, Pune"}]}


@pytest.fixture(autouse=True)
def _fast_http(monkeypatch):
    monkeypatch.setattr(settings, "HTTP_RATE_LIMIT_RPS", 0.0)
    monkeypatch.setattr(settings, "HTTP_BACKOFF_BASE_S", 0.0)


@pytest.mark.asyncio
async def test_geocode_ok_sends_one_line_address_and_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["address"] = request.url.params.get("address")
        seen["key"] = request.url.params.get("key")
        return httpx.Response(200, json=google_ok())

    g = GoogleGeocoder(api_key="k-test", transport=httpx.MockTransport(handler))
    res = await g.geocode(ADDR, timeout_s=2)

    assert res.ok
    assert res.source == "google"
    assert (res.latitude, res.longitude) == (18.5236, 73.8478)
    assert res.accuracy_meters == 100.0
    assert seen == {"address": "12 FC Road, Pune, MH, 411004, India", "key": "k-test"}


@pytest.mark.asyncio
async def test_geocode_uses_bounds_for_accuracy():
    bounds = {"northeast": {"lat": 18.53, "lng": 73.86}, "southwest": {"lat": 18.52, "lng": 73.85}}
    transport = httpx.MockTransport(lambda r: httpx.Response(200, json=google_ok(bounds=bounds)))
    res = await GoogleGeocoder(api_key="k", transport=transport).geocode(ADDR)
    assert 600 < res.accuracy_meters < 900


@pytest.mark.asyncio
async def test_geocode_zero_results_is_not_ok():
    transport = httpx.MockTransport(lambda r: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))
    res = await GoogleGeocoder(api_key="k", transport=transport).geocode(ADDR)
    assert not res.ok
    assert res.source == "geocoder_status:zero_results"


@pytest.mark.asyncio
async def test_geocode_without_key_is_disabled():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=google_ok())

    res = await GoogleGeocoder(api_key="", transport=httpx.MockTransport(handler)).geocode(ADDR)
    assert res.source == "disabled"
    assert calls == []


@pytest.mark.asyncio
async def test_geocode_server_error_is_reported_not_raised(monkeypatch):
    monkeypatch.setattr(settings, "HTTP_MAX_RETRIES", 1)
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503, json={})

    res = await GoogleGeocoder(api_key="k", transport=httpx.MockTransport(handler)).geocode(ADDR)
    assert not res.ok
    assert res.source == "geocoder_error:HTTPStatusError"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_open_circuit_short_circuits_calls(monkeypatch):
    monkeypatch.setattr(settings, "HTTP_MAX_RETRIES", 0)
    monkeypatch.setattr(settings, "HTTP_CIRCUIT_FAIL_THRESHOLD", 1)
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("boom", request=request)

    g = GoogleGeocoder(api_key="k", transport=httpx.MockTransport(handler))
    first = await g.geocode(ADDR)
    second = await g.geocode(ADDR)

    assert first.source == "geocoder_error:ConnectError"
    assert second.source == "geocoder_error:CircuitOpenError"
    assert len(calls) == 1
