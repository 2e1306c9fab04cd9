"""
Geofence & GeofenceEvent models: circular work zones and crossings.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, Float, ForeignKey, Index,
                        Integer, String)

from streamline.db.base import Base


class Geofence(Base):
    __tablename__ = "geofences"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    center_latitude: float = Column(Float, nullable=False)  # type: ignore[assignment]
    center_longitude: float = Column(Float, nullable=False)  # type: ignore[assignment]
    radius_meters: float = Column(Float, nullable=False)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class GeofenceEvent(Base):
    __tablename__ = "geofence_events"
    __table_args__ = (Index("ix_geofence_event_user_fence", "user_id", "geofence_id"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    geofence_id: int = Column(Integer, ForeignKey("geofences.id"), nullable=False)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)  # type: ignore[assignment]
    event_type: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # enter | exit
    latitude: float = Column(Float, nullable=False)  # type: ignore[assignment]
    longitude: float = Column(Float, nullable=False)  # type: ignore[assignment]
    distance_from_center: float = Column(Float, nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
