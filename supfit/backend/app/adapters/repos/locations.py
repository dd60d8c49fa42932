# app/adapters/repos/locations.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.types import LocationFix
from ...models import LocationCacheEntry, LocationConsent, utcnow
from .upsert import upsert_stmt


def _ensure_aware_utc(dt: datetime) -> datetime:
    """
    SQLite hands back naive datetimes even for timezone=True columns.
    If naive, assume it's UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def row_to_fix(row: LocationCacheEntry) -> LocationFix:
    return LocationFix(
        latitude=row.latitude,
        longitude=row.longitude,
        source=row.source,
        quality_score=row.quality_score,
        quality_tier=row.quality_tier,
        captured_at=_ensure_aware_utc(row.captured_at),
        accuracy_meters=row.accuracy_meters,
    )


class LocationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # --- cache ---
    async def get_entry(self, user_id: str) -> LocationCacheEntry | None:
        q = select(LocationCacheEntry).where(LocationCacheEntry.user_id == user_id)
        return (await self.session.execute(q)).scalars().first()

    async def get_fresh_fix(self, user_id: str, *, now: datetime) -> LocationFix | None:
        row = await self.get_entry(user_id)
        if row is None:
            return None
        if _ensure_aware_utc(row.expires_at) <= _ensure_aware_utc(now):
            return None
        return row_to_fix(row)

    async def upsert_fix(self, user_id: str, fix: LocationFix, *, expires_at: datetime) -> None:
        # whole-row replace; last writer wins
        stmt = upsert_stmt(
            self.session,
            LocationCacheEntry,
            {
                "user_id": user_id,
                "latitude": fix.latitude,
                "longitude": fix.longitude,
                "accuracy_meters": fix.accuracy_meters,
                "source": fix.source,
                "quality_score": fix.quality_score,
                "quality_tier": fix.quality_tier,
                "captured_at": fix.captured_at,
                "expires_at": expires_at,
            },
            index_elements=["user_id"],
            update_cols=[
                "latitude",
                "longitude",
                "accuracy_meters",
                "source",
                "quality_score",
                "quality_tier",
                "captured_at",
                "expires_at",
            ],
        )
        await self.session.execute(stmt)

    async def delete_fix(self, user_id: str) -> int:
        res = await self.session.execute(delete(LocationCacheEntry).where(LocationCacheEntry.user_id == user_id))
        return int(res.rowcount or 0)

    async def purge_expired(self, *, now: datetime) -> int:
        res = await self.session.execute(delete(LocationCacheEntry).where(LocationCacheEntry.expires_at <= now))
        return int(res.rowcount or 0)

    # --- consent ---
    async def has_gps_grant(self, user_id: str) -> bool:
        q = select(LocationConsent).where(LocationConsent.user_id == user_id)
        row = (await self.session.execute(q)).scalars().first()
        return bool(row and row.gps_granted)

    async def store_gps_grant(self, user_id: str) -> None:
        stmt = upsert_stmt(
            self.session,
            LocationConsent,
            {"user_id": user_id, "gps_granted": True, "granted_at": utcnow()},
            index_elements=["user_id"],
            update_cols=["gps_granted", "granted_at"],
        )
        await self.session.execute(stmt)

    async def delete_gps_grant(self, user_id: str) -> int:
        res = await self.session.execute(delete(LocationConsent).where(LocationConsent.user_id == user_id))
        return int(res.rowcount or 0)
