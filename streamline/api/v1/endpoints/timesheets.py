"""
Clock-in / clock-out, shift history and live location tracking.

Every shift belongs to a job: when job tracking is off, or the worker skips
job selection where it is optional, the company's default job is used.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.api.v1.deps import (find_membership, get_current_active_user,
                                    get_db, load_membership,
                                    require_company_admin)
from streamline.core.constants import GEOFENCE_ENTER
from streamline.core.timeutils import (day_window, ensure_utc,
                                       format_duration, hours_between,
                                       period_window, utcnow)
from streamline.models.company import Company, CompanyMember
from streamline.models.geofence import Geofence, GeofenceEvent
from streamline.models.job import Job
from streamline.models.timesheet import LocationPing, Timesheet
from streamline.models.user import User
from streamline.schemas.timesheet import (ActiveShift, ClockInRequest,
                                          ClockOutRequest, GeofenceCrossing,
                                          LatestLocation, LocationPingRead,
                                          LocationUpdateRequest,
                                          LocationUpdateResponse,
                                          TimesheetPeriodItem, TimesheetRead)
from streamline.services.company import available_jobs, ensure_default_job
from streamline.services.geo import detect_crossings

router = APIRouter(tags=["timesheets"])
logger = logging.getLogger(__name__)


# ── Helpers ─────────────────────────────────────────────────────────
async def _resolve_job(
    db: AsyncSession, company: Company, member: CompanyMember, job_id: int | None
) -> Job:
    if not company.job_tracking_enabled:
        return await ensure_default_job(db, company)

    if job_id is None:
        if company.job_selection_required:
            raise HTTPException(status_code=400, detail="Job selection is required to clock in")
        return await ensure_default_job(db, company)

    job = await db.get(Job, job_id)
    if job is None or job.company_id != company.id:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.is_system_default:
        return job
    if job.is_archived or job.id not in {j.id for j in await available_jobs(db, company, member)}:
        raise HTTPException(status_code=403, detail="You are not assigned to this job")
    return job


async def _record_ping(
    db: AsyncSession,
    company: Company,
    timesheet: Timesheet,
    latitude: float,
    longitude: float,
) -> tuple[LocationPing, list[GeofenceCrossing]]:
    """Store a ping and, when geofencing is on, any enter/exit crossings it causes."""
    ping = LocationPing(
        user_id=timesheet.staff_id,
        timesheet_id=timesheet.id,
        latitude=latitude,
        longitude=longitude,
    )
    db.add(ping)
    await db.flush()

    if not company.geofencing_enabled:
        return ping, []

    fences = (
        await db.execute(
            select(Geofence).where(
                Geofence.company_id == company.id,
                Geofence.is_active.is_(True),
            )
        )
    ).scalars().all()
    if not fences:
        return ping, []

    # Last event per fence decides whether the user was inside before this ping
    history = await db.execute(
        select(GeofenceEvent.geofence_id, GeofenceEvent.event_type)
        .where(
            GeofenceEvent.user_id == timesheet.staff_id,
            GeofenceEvent.geofence_id.in_([f.id for f in fences]),
        )
        .order_by(GeofenceEvent.created_at, GeofenceEvent.id)
    )
    inside_before = {fence_id: event_type == GEOFENCE_ENTER for fence_id, event_type in history.all()}

    names = {f.id: f.name for f in fences}
    crossings = []
    for crossing in detect_crossings(latitude, longitude, fences, inside_before):
        db.add(
            GeofenceEvent(
                geofence_id=crossing.geofence_id,
                user_id=timesheet.staff_id,
                company_id=company.id,
                event_type=crossing.event_type,
                latitude=latitude,
                longitude=longitude,
                distance_from_center=crossing.distance_from_center,
            )
        )
        crossings.append(
            GeofenceCrossing(
                geofence_id=crossing.geofence_id,
                geofence_name=names[crossing.geofence_id],
                event_type=crossing.event_type,
                distance_from_center=crossing.distance_from_center,
            )
        )
        logger.info(
            "User %d %s geofence %d", timesheet.staff_id, crossing.event_type, crossing.geofence_id
        )
    return ping, crossings


# ── Clock in / out ──────────────────────────────────────────────────
@router.post("/timesheets/clock-in", response_model=TimesheetRead, status_code=201)
async def clock_in(
    body: ClockInRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Timesheet:
    """Open a shift at the caller's GPS position."""
    member = await load_membership(db, body.company_id, current_user)
    company = await db.get(Company, body.company_id)

    open_shift = await db.execute(
        select(Timesheet.id).where(
            Timesheet.staff_id == current_user.id,
            Timesheet.clock_out.is_(None),
        )
    )
    if open_shift.first() is not None:
        raise HTTPException(status_code=409, detail="You are already clocked in")

    job = await _resolve_job(db, company, member, body.job_id)

    timesheet = Timesheet(
        company_id=company.id,
        staff_id=current_user.id,
        job_id=job.id,
        clock_in=utcnow(),
        clock_in_latitude=body.latitude,
        clock_in_longitude=body.longitude,
    )
    db.add(timesheet)
    try:
        await db.flush()
    except IntegrityError:
        # a concurrent clock-in won the open-shift index
        await db.rollback()
        raise HTTPException(status_code=409, detail="You are already clocked in")

    if company.location_tracking_enabled:
        await _record_ping(db, company, timesheet, body.latitude, body.longitude)

    await db.commit()
    await db.refresh(timesheet)
    logger.info("User %d clocked in (timesheet %d, job %d)", current_user.id, timesheet.id, job.id)
    return timesheet


@router.post("/timesheets/{timesheet_id}/clock-out", response_model=TimesheetRead)
async def clock_out(
    timesheet_id: int,
    body: ClockOutRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Timesheet:
    """Close a shift. Admins may close shifts for their staff."""
    timesheet = await db.get(Timesheet, timesheet_id)
    if timesheet is None:
        raise HTTPException(status_code=404, detail="Timesheet not found")

    if timesheet.staff_id != current_user.id:
        member = await find_membership(db, timesheet.company_id, current_user.id)
        if member is None or member.role != "admin":
            raise HTTPException(status_code=403, detail="Not allowed to clock out this shift")

    if timesheet.clock_out is not None:
        raise HTTPException(status_code=409, detail="This shift is already clocked out")

    timesheet.clock_out = utcnow()
    timesheet.clock_out_latitude = body.latitude
    timesheet.clock_out_longitude = body.longitude
    await db.commit()
    await db.refresh(timesheet)

    logger.info(
        "Timesheet %d clocked out by user %d (%.2f h)",
        timesheet.id,
        current_user.id,
        hours_between(timesheet.clock_in, timesheet.clock_out),
    )
    return timesheet


@router.get("/timesheets/active", response_model=ActiveShift | None)
async def read_active_shift(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ActiveShift | None:
    """The caller's open shift, or ``null``."""
    result = await db.execute(
        select(Timesheet, Job.name)
        .outerjoin(Job, Job.id == Timesheet.job_id)
        .where(Timesheet.staff_id == current_user.id, Timesheet.clock_out.is_(None))
        .order_by(Timesheet.clock_in.desc())
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None
    timesheet, job_name = row
    return ActiveShift(
        **TimesheetRead.model_validate(timesheet).model_dump(),
        job_name=job_name,
        elapsed_hours=round(hours_between(timesheet.clock_in, utcnow()), 2),
    )


@router.get("/timesheets", response_model=list[TimesheetPeriodItem])
async def list_my_timesheets(
    company_id: int,
    period: str = Query("week", pattern="^(today|week|month)$"),
    start: date | None = None,
    end: date | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[TimesheetPeriodItem]:
    """The caller's shifts for a period, newest first.

    ``start``/``end`` (company-local dates, inclusive) take precedence over
    ``period``.
    """
    await load_membership(db, company_id, current_user)
    company = await db.get(Company, company_id)

    if start is not None or end is not None:
        start = start or end
        end = end or start
        if start > end:
            raise HTTPException(status_code=400, detail="start must not be after end")
        lo, hi = day_window(start, end, company.time_zone)
    else:
        lo, hi = period_window(period, company.time_zone)

    result = await db.execute(
        select(Timesheet, Job.name)
        .outerjoin(Job, Job.id == Timesheet.job_id)
        .where(
            Timesheet.company_id == company_id,
            Timesheet.staff_id == current_user.id,
            Timesheet.clock_in >= lo,
            Timesheet.clock_in < hi,
        )
        .order_by(Timesheet.clock_in.desc())
    )

    now = utcnow()
    items = []
    for ts, job_name in result.all():
        hours = hours_between(ts.clock_in, ts.clock_out or now)
        items.append(
            TimesheetPeriodItem(
                id=ts.id,
                job_name=job_name,
                clock_in=ensure_utc(ts.clock_in),
                clock_out=ensure_utc(ts.clock_out),
                duration=format_duration(hours),
                duration_hours=round(hours, 2),
                clock_in_latitude=ts.clock_in_latitude,
                clock_in_longitude=ts.clock_in_longitude,
                clock_out_latitude=ts.clock_out_latitude,
                clock_out_longitude=ts.clock_out_longitude,
            )
        )
    return items


# ── Location tracking ───────────────────────────────────────────────
@router.post(
    "/timesheets/{timesheet_id}/locations",
    response_model=LocationUpdateResponse,
    status_code=201,
)
async def post_location(
    timesheet_id: int,
    body: LocationUpdateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> LocationUpdateResponse:
    """Record a GPS sample for the caller's open shift."""
    timesheet = await db.get(Timesheet, timesheet_id)
    if timesheet is None or timesheet.staff_id != current_user.id:
        raise HTTPException(status_code=404, detail="Timesheet not found")
    if timesheet.clock_out is not None:
        raise HTTPException(status_code=409, detail="This shift is already clocked out")

    company = await db.get(Company, timesheet.company_id)
    if not company.location_tracking_enabled:
        raise HTTPException(status_code=403, detail="Location tracking is disabled for this company")

    ping, crossings = await _record_ping(db, company, timesheet, body.latitude, body.longitude)
    await db.commit()
    await db.refresh(ping)
    return LocationUpdateResponse(
        ping=LocationPingRead.model_validate(ping),
        geofence_events=crossings,
    )


@router.get("/companies/{company_id}/locations/latest", response_model=list[LatestLocation])
async def latest_locations(
    company_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> list[LatestLocation]:
    """Newest ping for every worker currently on shift (live map)."""
    result = await db.execute(
        select(LocationPing, User.full_name)
        .join(Timesheet, Timesheet.id == LocationPing.timesheet_id)
        .join(User, User.id == LocationPing.user_id)
        .where(Timesheet.company_id == company_id, Timesheet.clock_out.is_(None))
        .order_by(LocationPing.created_at.desc(), LocationPing.id.desc())
    )

    latest: dict[int, LatestLocation] = {}
    for ping, full_name in result.all():
        if ping.user_id in latest:
            continue
        latest[ping.user_id] = LatestLocation(
            user_id=ping.user_id,
            full_name=full_name,
            timesheet_id=ping.timesheet_id,
            latitude=ping.latitude,
            longitude=ping.longitude,
            last_updated_at=ensure_utc(ping.created_at),
        )
    return list(latest.values())
