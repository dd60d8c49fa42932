# app/models.py
from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .domain.types import LocationSource, QualityTier


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


# -----------------------------
# Core enums
# -----------------------------
class AuditAction(str, enum.Enum):
    create = "create"
    update = "update"
    delete = "delete"
    read = "read"


class ProfessionalType(str, enum.Enum):
    coach = "coach"
    dietician = "dietician"
    nutritionist = "nutritionist"
    physiotherapist = "physiotherapist"
    yoga = "yoga"


class JobRunStatus(str, enum.Enum):
    running = "running"
    success = "success"
    failed = "failed"


# -----------------------------
# Models
# -----------------------------
class MatchConfig(Base):
    """
    Single active row per config_key. The signal weights live under
    config_key="signal_weights" and are replaced whole on every update.
    """
    __tablename__ = "match_config"
    __table_args__ = (UniqueConstraint("config_key", name="uq_match_config_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    config_key: Mapped[str] = mapped_column(String(80))
    config_value_json: Mapped[str] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class ConfigAuditLog(Base):
    """Append-only. Nothing in the app updates or deletes these rows."""
    __tablename__ = "config_audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    actor_id: Mapped[str] = mapped_column(String(120), index=True)
    config_key: Mapped[str] = mapped_column(String(80), index=True)

    old_value_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value_json: Mapped[str] = mapped_column(Text)
    change_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)


class LocationCacheEntry(Base):
    __tablename__ = "location_cache"
    __table_args__ = (UniqueConstraint("user_id", name="uq_location_cache_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(120))

    latitude: Mapped[float] = mapped_column(Float)
    longitude: Mapped[float] = mapped_column(Float)
    accuracy_meters: Mapped[float | None] = mapped_column(Float, nullable=True)

    source: Mapped[LocationSource] = mapped_column(Enum(LocationSource))
    quality_score: Mapped[float] = mapped_column(Float)
    quality_tier: Mapped[QualityTier] = mapped_column(Enum(QualityTier))

    captured_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class LocationConsent(Base):
    """Stored GPS permission grant; cleared on revoke."""
    __tablename__ = "location_consent"
    __table_args__ = (UniqueConstraint("user_id", name="uq_location_consent_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(120))
    gps_granted: Mapped[bool] = mapped_column(Boolean, default=False)
    granted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    action: Mapped[AuditAction] = mapped_column(Enum(AuditAction), index=True)
    table_name: Mapped[str] = mapped_column(String(80), index=True)
    user_id: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)
    purpose: Mapped[str | None] = mapped_column(String(80), nullable=True)

    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)


class Professional(Base):
    __tablename__ = "professionals"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    professional_type: Mapped[ProfessionalType] = mapped_column(Enum(ProfessionalType), index=True)

    # JSON arrays of normalized strings
    specialties_json: Mapped[str] = mapped_column(Text, default="[]")
    modes_json: Mapped[str] = mapped_column(Text, default="[]")
    timings_json: Mapped[str] = mapped_column(Text, default="[]")

    price: Mapped[float] = mapped_column(Float, default=0.0)
    rating: Mapped[float] = mapped_column(Float, default=0.0)
    review_count: Mapped[int] = mapped_column(Integer, default=0)
    has_open_slot: Mapped[bool] = mapped_column(Boolean, default=False)

    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lon: Mapped[float | None] = mapped_column(Float, nullable=True)
    location_source: Mapped[LocationSource | None] = mapped_column(Enum(LocationSource), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class MatchSignalLog(Base):
    """Per-search result snapshot for analytics. Best-effort, never authoritative."""
    __tablename__ = "match_signals_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(120), index=True)
    signal_name: Mapped[str] = mapped_column(String(80))
    signal_value: Mapped[float] = mapped_column(Float, default=0.0)
    reasoning_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)


class JobRun(Base):
    """
    Tracks maintenance job executions (location cache purge, etc.)
    """
    __tablename__ = "job_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_name: Mapped[str] = mapped_column(String(80), index=True)

    status: Mapped[JobRunStatus] = mapped_column(Enum(JobRunStatus), default=JobRunStatus.running, index=True)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # store error stack or message
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    meta_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary_json: Mapped[str | None] = mapped_column(Text, nullable=True)
