"""
Geofence CRUD and the enter/exit event log.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.api.v1.deps import get_db, get_membership, require_company_admin
from streamline.models.company import CompanyMember
from streamline.models.geofence import Geofence, GeofenceEvent
from streamline.models.user import User
from streamline.schemas.company import DeleteResponse
from streamline.schemas.timesheet import (GeofenceCreate, GeofenceEventRead,
                                          GeofenceRead, GeofenceUpdate)

router = APIRouter(prefix="/companies", tags=["geofences"])
logger = logging.getLogger(__name__)


async def _get_geofence(db: AsyncSession, company_id: int, geofence_id: int) -> Geofence:
    fence = await db.get(Geofence, geofence_id)
    if fence is None or fence.company_id != company_id:
        raise HTTPException(status_code=404, detail="Geofence not found")
    return fence


@router.get("/{company_id}/geofences", response_model=list[GeofenceRead])
async def list_geofences(
    company_id: int,
    db: AsyncSession = Depends(get_db),
    _member: CompanyMember = Depends(get_membership),
) -> list[Geofence]:
    result = await db.execute(
        select(Geofence).where(Geofence.company_id == company_id).order_by(Geofence.name, Geofence.id)
    )
    return list(result.scalars().all())


@router.post("/{company_id}/geofences", response_model=GeofenceRead, status_code=201)
async def create_geofence(
    company_id: int,
    body: GeofenceCreate,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> Geofence:
    fence = Geofence(company_id=company_id, **body.model_dump())
    db.add(fence)
    await db.commit()
    await db.refresh(fence)
    logger.info("Geofence %d created for company %d (r=%.0fm)", fence.id, company_id, fence.radius_meters)
    return fence


@router.get("/{company_id}/geofences/{geofence_id}", response_model=GeofenceRead)
async def read_geofence(
    company_id: int,
    geofence_id: int,
    db: AsyncSession = Depends(get_db),
    _member: CompanyMember = Depends(get_membership),
) -> Geofence:
    return await _get_geofence(db, company_id, geofence_id)


@router.put("/{company_id}/geofences/{geofence_id}", response_model=GeofenceRead)
async def update_geofence(
    company_id: int,
    geofence_id: int,
    body: GeofenceUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> Geofence:
    fence = await _get_geofence(db, company_id, geofence_id)
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(fence, field, value)
    await db.commit()
    await db.refresh(fence)
    return fence


@router.delete("/{company_id}/geofences/{geofence_id}", response_model=DeleteResponse)
async def delete_geofence(
    company_id: int,
    geofence_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> DeleteResponse:
    """Delete a geofence together with its event history."""
    fence = await _get_geofence(db, company_id, geofence_id)
    await db.execute(sa_delete(GeofenceEvent).where(GeofenceEvent.geofence_id == fence.id))
    await db.delete(fence)
    await db.commit()
    logger.info("Geofence %d deleted", geofence_id)
    return DeleteResponse(success=True, message="Geofence deleted")


@router.get("/{company_id}/geofence-events", response_model=list[GeofenceEventRead])
async def list_geofence_events(
    company_id: int,
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> list[GeofenceEventRead]:
    """Most recent crossings first."""
    result = await db.execute(
        select(GeofenceEvent, Geofence.name, User.full_name)
        .join(Geofence, Geofence.id == GeofenceEvent.geofence_id)
        .join(User, User.id == GeofenceEvent.user_id)
        .where(GeofenceEvent.company_id == company_id)
        .order_by(GeofenceEvent.created_at.desc(), GeofenceEvent.id.desc())
        .limit(limit)
    )
    return [
        GeofenceEventRead(
            id=event.id,
            geofence_id=event.geofence_id,
            geofence_name=fence_name,
            user_id=event.user_id,
            full_name=full_name,
            event_type=event.event_type,
            latitude=event.latitude,
            longitude=event.longitude,
            distance_from_center=event.distance_from_center,
            created_at=event.created_at,
        )
        for event, fence_name, full_name in result.all()
    ]
