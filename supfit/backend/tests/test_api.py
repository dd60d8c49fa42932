import httpx
import pytest

from app.config import settings
from app.entrypoints.fastapi_app import create_app
from app.service_layer.demo_seed import DEMO_PROFESSIONALS
from app.service_layer.location_strategies import AddressStrategy, CentroidStrategy, GpsStrategy

from factories import FakeGeocoder


@pytest.fixture
async def client(engine, async_session_maker, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", None)
    app = create_app(
        session_factory=async_session_maker,
        engine=engine,
        strategies=[GpsStrategy(), AddressStrategy(FakeGeocoder()), CentroidStrategy()],
    )
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def seed(client):
    for p in DEMO_PROFESSIONALS:
        r = await client.post("/professionals", json=p)
        assert r.status_code == 200, r.text


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "db": "ok"}


@pytest.mark.asyncio
async def test_search_ranks_seeded_professionals(client):
    await seed(client)
    r = await client.post("/users/u1/location", json={"region": "Pune"})
    assert r.status_code == 200
    assert r.json()["source"] == "centroid"

    r = await client.post(
        "/match/search",
        json={
            "user_id": "u1",
            "goal_categories": ["Weight Loss"],
            "filters": {"max_price": 3000, "modes": ["online"]},
            "radius_km": 10,
        },
    )
    assert r.status_code == 200, r.text
    results = r.json()
    assert [m["rank"] for m in results] == list(range(1, len(results) + 1))
    assert results[0]["candidate_id"] == "coach-aarav"
    scores = [m["composite_score"] for m in results]
    assert scores == sorted(scores, reverse=True)
    for m in results:
        assert set(m["per_signal_score"]) == {"proximity", "goal_alignment", "budget_fit", "rating", "availability"}


@pytest.mark.asyncio
async def test_search_without_location_still_ranks(client):
    await seed(client)
    r = await client.post("/match/search", json={"user_id": "nobody", "goal_categories": ["nutrition"]})
    assert r.status_code == 200
    results = r.json()
    assert results
    assert all(m["per_signal_score"]["proximity"] is None for m in results)


@pytest.mark.asyncio
async def test_search_without_goals_is_rejected(client):
    r = await client.post("/match/search", json={"user_id": "u1", "goal_categories": []})
    assert r.status_code == 422
    assert "goal" in r.json()["detail"]


@pytest.mark.asyncio
async def test_professional_type_filter(client):
    await seed(client)
    r = await client.post(
        "/match/search",
        json={"user_id": "u1", "goal_categories": ["weight loss"], "professional_type": "dietician"},
    )
    assert [m["candidate_id"] for m in r.json()] == ["diet-rohan"]


@pytest.mark.asyncio
async def test_weight_update_rejects_bad_sum_and_keeps_prior(client):
    r = await client.put(
        "/admin/weights",
        json={
            "weights": {"proximity": 40, "goal_alignment": 25, "budget_fit": 20, "rating": 10, "availability": 10},
            "actor_id": "admin-1",
        },
    )
    assert r.status_code == 422
    assert "105" in r.json()["detail"]

    r = await client.get("/admin/weights")
    assert r.json() == {"proximity": 30.0, "goal_alignment": 25.0, "budget_fit": 20.0, "rating": 15.0, "availability": 10.0}


@pytest.mark.asyncio
async def test_weight_update_and_history(client):
    new = {"proximity": 20, "goal_alignment": 35, "budget_fit": 20, "rating": 15, "availability": 10}
    r = await client.put("/admin/weights", json={"weights": new, "actor_id": "admin-1", "reason": "goals first"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["audited"] is True
    assert body["weights"]["goal_alignment"] == 35.0
    assert body["change"]["previous_weights"]["proximity"] == 30.0

    r = await client.get("/admin/weights/history")
    hist = r.json()
    assert len(hist) == 1
    assert hist[0]["actor_id"] == "admin-1"

    r = await client.post("/admin/weights/reset", json={"actor_id": "admin-2"})
    assert r.status_code == 200
    assert r.json()["weights"]["proximity"] == 30.0


@pytest.mark.asyncio
async def test_weight_reset_with_blank_actor_is_rejected(client):
    r = await client.post("/admin/weights/reset", json={"actor_id": "   "})
    assert r.status_code == 422
    assert "actor_id" in r.json()["detail"]

    r = await client.get("/admin/weights/history")
    assert r.json() == []


@pytest.mark.asyncio
async def test_admin_routes_need_api_key_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "secret-key")
    assert (await client.get("/admin/weights")).status_code == 401
    ok = await client.get("/admin/weights", headers={"X-API-Key": "secret-key"})
    assert ok.status_code == 200


@pytest.mark.asyncio
async def test_location_consent_and_revoke(client):
    r = await client.post("/users/u1/location/consent")
    assert r.json() == {"user_id": "u1", "gps_granted": True}

    r = await client.post("/users/u1/location", json={"gps": {"latitude": 18.53, "longitude": 73.84, "accuracy_meters": 10}})
    assert r.json()["source"] == "gps"
    assert r.json()["quality_tier"] == "high"

    for _ in range(2):
        r = await client.delete("/users/u1/location")
        assert r.status_code == 200
        assert r.json() == {"user_id": "u1", "revoked": True}

    r = await client.get("/users/u1/location")
    assert r.json()["status"] == "unavailable"
    assert r.json()["source"] == "unknown"


@pytest.mark.asyncio
async def test_location_address_payload(client):
    r = await client.post(
        "/users/u1/location",
        json={"allow_gps": False, "address": {"addressLine": "12 FC Road", "city": "Pune", "state": "MH", "zipCode": "411004"}},
    )
    body = r.json()
    assert body["status"] == "resolved"
    assert body["source"] == "address"
    assert body["quality_score"] == 85


@pytest.mark.asyncio
async def test_purge_job_endpoint(client):
    r = await client.post("/jobs/purge-locations")
    assert r.status_code == 200
    assert r.json() == {"purged": 0}
