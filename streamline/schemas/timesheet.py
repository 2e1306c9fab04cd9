"""Pydantic schemas for clock-in/out, location pings and geofences."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, field_validator

from streamline.core.constants import MAX_GEOFENCE_RADIUS_METERS

Latitude = Annotated[float, Field(ge=-90, le=90)]
Longitude = Annotated[float, Field(ge=-180, le=180)]


# ── Clock in / out ─────────────────────────────────────────────────
class ClockInRequest(BaseModel):
    company_id: int
    job_id: int | None = None
    latitude: Latitude
    longitude: Longitude


class ClockOutRequest(BaseModel):
    latitude: Latitude
    longitude: Longitude


class TimesheetRead(BaseModel):
    id: int
    company_id: int
    staff_id: int
    job_id: int
    clock_in: datetime
    clock_out: datetime | None
    clock_in_latitude: float | None
    clock_in_longitude: float | None
    clock_out_latitude: float | None
    clock_out_longitude: float | None

    model_config = {"from_attributes": True}


class ActiveShift(TimesheetRead):
    job_name: str | None = None
    elapsed_hours: float = 0.0


class TimesheetPeriodItem(BaseModel):
    id: int
    job_name: str | None
    clock_in: datetime
    clock_out: datetime | None
    duration: str  # HH:MM:SS, open shifts measured up to now
    duration_hours: float
    clock_in_latitude: float | None
    clock_in_longitude: float | None
    clock_out_latitude: float | None
    clock_out_longitude: float | None


# ── Location pings ─────────────────────────────────────────────────
class LocationUpdateRequest(BaseModel):
    latitude: Latitude
    longitude: Longitude


class LocationPingRead(BaseModel):
    id: int
    user_id: int
    timesheet_id: int
    latitude: float
    longitude: float
    created_at: datetime | None

    model_config = {"from_attributes": True}


class GeofenceCrossing(BaseModel):
    geofence_id: int
    geofence_name: str
    event_type: str
    distance_from_center: float


class LocationUpdateResponse(BaseModel):
    ping: LocationPingRead
    geofence_events: list[GeofenceCrossing] = Field(default_factory=list)


class LatestLocation(BaseModel):
    user_id: int
    full_name: str | None
    timesheet_id: int
    latitude: float
    longitude: float
    last_updated_at: datetime


# ── Geofences ──────────────────────────────────────────────────────
class GeofenceCreate(BaseModel):
    name: str
    description: str | None = None
    center_latitude: Latitude
    center_longitude: Longitude
    radius_meters: float = Field(gt=0, le=MAX_GEOFENCE_RADIUS_METERS)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Geofence name must not be empty")
        return v


class GeofenceUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    center_latitude: float | None = Field(default=None, ge=-90, le=90)
    center_longitude: float | None = Field(default=None, ge=-180, le=180)
    radius_meters: float | None = Field(default=None, gt=0, le=MAX_GEOFENCE_RADIUS_METERS)
    is_active: bool | None = None


class GeofenceRead(BaseModel):
    id: int
    company_id: int
    name: str
    description: str | None
    center_latitude: float
    center_longitude: float
    radius_meters: float
    is_active: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class GeofenceEventRead(BaseModel):
    id: int
    geofence_id: int
    geofence_name: str
    user_id: int
    full_name: str | None
    event_type: str
    latitude: float
    longitude: float
    distance_from_center: float
    created_at: datetime | None
