# app/domain/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class LocationSource(str, Enum):
    gps = "gps"  # device GPS (±5-20m)
    address = "address"  # geocoded structured address (±30-100m)
    centroid = "centroid"  # city/region centroid (±1-5km)
    unknown = "unknown"


class QualityTier(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"
    unavailable = "unavailable"


class Signal(str, Enum):
    proximity = "proximity"
    goal_alignment = "goal_alignment"
    budget_fit = "budget_fit"
    rating = "rating"
    availability = "availability"


# Stable order for weights, breakdowns and explain strings
SIGNALS: tuple[Signal, ...] = (
    Signal.proximity,
    Signal.goal_alignment,
    Signal.budget_fit,
    Signal.rating,
    Signal.availability,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LocationFix:
    latitude: float
    longitude: float
    source: LocationSource
    quality_score: float
    quality_tier: QualityTier
    captured_at: datetime = field(default_factory=_utcnow)
    accuracy_meters: float | None = None

    @classmethod
    def unavailable(cls) -> "LocationFix":
        return cls(
            latitude=0.0,
            longitude=0.0,
            source=LocationSource.unknown,
            quality_score=0.0,
            quality_tier=QualityTier.unavailable,
        )

    @property
    def is_known(self) -> bool:
        return self.source != LocationSource.unknown


@dataclass(frozen=True)
class GpsReading:
    latitude: float
    longitude: float
    accuracy_meters: float | None = None


@dataclass(frozen=True)
class StructuredAddress:
    line1: str
    city: str
    state: str
    postal: str
    country: str | None = None

    def is_complete(self) -> bool:
        return all((v or "").strip() for v in (self.line1, self.city, self.state, self.postal))

    def one_line(self, default_country: str | None = None) -> str:
        parts = [self.line1, self.city, self.state, self.postal, self.country or default_country]
        return ", ".join(str(p).strip() for p in parts if p and str(p).strip())


@dataclass(frozen=True)
class LocationRequest:
    """
    What the caller permits for one resolution attempt.

    GPS needs both a stored permission grant (or allow_gps on this call) and
    capture_gps; the address step needs a complete structured address; the
    centroid step needs only a city/region name.
    """
    user_id: str
    allow_gps: bool = False
    capture_gps: bool = True
    gps: GpsReading | None = None  # device-reported reading, if the client sent one
    address: StructuredAddress | None = None
    region: str | None = None
    force_refresh: bool = False
    timeout_s: float | None = None


@dataclass(frozen=True)
class StrategyOutcome:
    fix: LocationFix | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.fix is not None


@dataclass(frozen=True)
class SignalWeights:
    proximity: float = 30.0
    goal_alignment: float = 25.0
    budget_fit: float = 20.0
    rating: float = 15.0
    availability: float = 10.0

    def as_dict(self) -> dict[str, float]:
        return {s.value: float(getattr(self, s.value)) for s in SIGNALS}

    def of(self, signal: Signal) -> float:
        return float(getattr(self, signal.value))

    def total(self) -> float:
        return sum(self.as_dict().values())

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SignalWeights":
        """No validation here; see domain.policies.validate_weights."""
        return cls(**{s.value: float(data[s.value]) for s in SIGNALS})


DEFAULT_WEIGHTS = SignalWeights()


@dataclass(frozen=True)
class WeightChangeRecord:
    actor_id: str
    previous_weights: SignalWeights
    new_weights: SignalWeights
    timestamp: datetime
    reason: str | None = None


@dataclass(frozen=True)
class SearchCriteria:
    goal_categories: frozenset[str]
    modes: frozenset[str] = frozenset()
    timings: frozenset[str] = frozenset()
    min_rating: float | None = None
    max_price: float | None = None
    origin_location: LocationFix | None = None
    radius_km: float = 5.0
    result_limit: int = 10


@dataclass(frozen=True)
class Candidate:
    id: str
    specialties: frozenset[str]
    price_value: float
    rating_value: float
    review_count: int
    available_modes: frozenset[str] = frozenset()
    available_timings: frozenset[str] = frozenset()
    location_fix: LocationFix | None = None
    has_open_slot: bool = False


@dataclass(frozen=True)
class MatchResult:
    candidate_id: str
    per_signal_score: dict[str, float | None]
    composite_score: int
    rank: int
    match_label: str
    explain: str = ""
