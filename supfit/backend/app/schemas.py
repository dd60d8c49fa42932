from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ProfessionalTypeName = Literal["coach", "dietician", "nutritionist", "physiotherapist", "yoga"]
LocationSourceName = Literal["gps", "address", "centroid", "unknown"]


# ----- Matching -----

class SearchFiltersIn(BaseModel):
    modes: list[str] = Field(default_factory=list)
    timings: list[str] = Field(default_factory=list)
    min_rating: float | None = Field(default=None, ge=0, le=5)
    max_price: float | None = Field(default=None, ge=0)


class SearchRequest(BaseModel):
    user_id: str
    goal_categories: list[str]
    filters: SearchFiltersIn = Field(default_factory=SearchFiltersIn)
    radius_km: float | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=1, le=100)
    professional_type: ProfessionalTypeName | None = None


class MatchOut(BaseModel):
    candidate_id: str
    composite_score: int = Field(..., ge=0, le=100)
    rank: int = Field(..., ge=1)
    match_label: str
    per_signal_score: dict[str, float | None]
    explain: str


# ----- Weights (admin) -----

class SignalWeightsOut(BaseModel):
    proximity: float
    goal_alignment: float
    budget_fit: float
    rating: float
    availability: float


class WeightUpdateIn(BaseModel):
    # kept loose on purpose: the domain validator produces the actionable message
    weights: dict[str, Any]
    actor_id: str = Field(..., min_length=1)
    reason: str | None = None


class WeightResetIn(BaseModel):
    actor_id: str = Field(..., min_length=1)
    reason: str | None = None


class WeightChangeOut(BaseModel):
    actor_id: str
    previous_weights: SignalWeightsOut
    new_weights: SignalWeightsOut
    reason: str | None = None
    timestamp: datetime


class WeightUpdateOut(BaseModel):
    weights: SignalWeightsOut
    change: WeightChangeOut
    audited: bool
    audit_error: str | None = None


# ----- Location -----

class GpsIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy_meters: float | None = Field(default=None, ge=0)


class LocationRequestIn(BaseModel):
    allow_gps: bool = False
    capture_gps: bool = True
    gps: GpsIn | None = None
    # loose form payload: line1/city/state/postal/country (or addressLine/zipCode variants)
    address: dict[str, Any] | None = None
    region: str | None = None
    force_refresh: bool = False
    timeout_s: float | None = Field(default=None, gt=0, le=60)


class LocationFixOut(BaseModel):
    status: Literal["resolved", "unavailable"]
    latitude: float | None = None
    longitude: float | None = None
    accuracy_meters: float | None = None
    source: LocationSourceName
    quality_score: float
    quality_tier: Literal["high", "medium", "low", "unavailable"]
    captured_at: datetime | None = None


class RevokeOut(BaseModel):
    user_id: str
    revoked: bool = True


class ConsentOut(BaseModel):
    user_id: str
    gps_granted: bool


# ----- Professionals -----

class ProfessionalIn(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    name: str
    professional_type: ProfessionalTypeName = "coach"
    specialties: list[str] = Field(default_factory=list)
    modes: list[str] = Field(default_factory=list)
    timings: list[str] = Field(default_factory=list)
    price: float = Field(0.0, ge=0)
    rating: float = Field(0.0, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    has_open_slot: bool = False
    lat: float | None = Field(default=None, ge=-90, le=90)
    lon: float | None = Field(default=None, ge=-180, le=180)
    location_source: LocationSourceName | None = None


class ProfessionalOut(BaseModel):
    id: str
    name: str
    professional_type: str
    specialties: list[str]
    price: float
    rating: float
    review_count: int
    has_open_slot: bool
    created: bool | None = None


class JobResult(BaseModel):
    purged: int = Field(..., ge=0)
