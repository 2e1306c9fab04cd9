"""
Job (work site) and job-assignment endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.api.v1.deps import (find_membership, get_company, get_db,
                                    get_membership, require_company_admin)
from streamline.models.company import Company, CompanyMember
from streamline.models.job import Job, JobAssignment
from streamline.schemas.job import (JobAssignmentRead, JobAssignmentToggle,
                                    JobCreate, JobRead, JobSelectionRequired,
                                    JobUpdate)
from streamline.services.company import available_jobs, enforce_job_limit

router = APIRouter(prefix="/companies", tags=["jobs"])
logger = logging.getLogger(__name__)


async def _get_job(db: AsyncSession, company_id: int, job_id: int) -> Job:
    job = await db.get(Job, job_id)
    if job is None or job.company_id != company_id:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


# Static paths first so they are not captured by /jobs/{job_id}
@router.get("/{company_id}/jobs/available", response_model=list[JobRead])
async def list_available_jobs(
    company: Company = Depends(get_company),
    member: CompanyMember = Depends(get_membership),
    db: AsyncSession = Depends(get_db),
) -> list[Job]:
    """Jobs the caller may clock into."""
    jobs = await available_jobs(db, company, member)
    await db.commit()  # persists a freshly created default job
    return jobs


@router.get("/{company_id}/job-selection-required", response_model=JobSelectionRequired)
async def job_selection_required(company: Company = Depends(get_company)) -> JobSelectionRequired:
    return JobSelectionRequired(
        required=bool(company.job_tracking_enabled and company.job_selection_required)
    )


@router.get("/{company_id}/jobs", response_model=list[JobRead])
async def list_jobs(
    company_id: int,
    include_archived: bool = False,
    db: AsyncSession = Depends(get_db),
    _member: CompanyMember = Depends(get_membership),
) -> list[Job]:
    """System default job first, then newest first."""
    stmt = select(Job).where(Job.company_id == company_id)
    if not include_archived:
        stmt = stmt.where(Job.is_archived.is_(False))
    result = await db.execute(
        stmt.order_by(Job.is_system_default.desc(), Job.created_at.desc(), Job.id.desc())
    )
    return list(result.scalars().all())


@router.post("/{company_id}/jobs", response_model=JobRead, status_code=201)
async def create_job(
    company_id: int,
    body: JobCreate,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> Job:
    await enforce_job_limit(db, company_id)

    job = Job(company_id=company_id, name=body.name, address=body.address)
    db.add(job)
    await db.commit()
    await db.refresh(job)
    logger.info("Job %d created for company %d", job.id, company_id)
    return job


@router.put("/{company_id}/jobs/{job_id}", response_model=JobRead)
async def update_job(
    company_id: int,
    job_id: int,
    body: JobUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> Job:
    job = await _get_job(db, company_id, job_id)
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(job, field, value)
    await db.commit()
    await db.refresh(job)
    return job


@router.delete("/{company_id}/jobs/{job_id}", response_model=JobRead)
async def archive_job(
    company_id: int,
    job_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> Job:
    """Archive rather than delete so past timesheets keep their job."""
    job = await _get_job(db, company_id, job_id)
    if job.is_system_default:
        raise HTTPException(status_code=400, detail="The default job cannot be archived")

    job.is_archived = True
    await db.commit()
    await db.refresh(job)
    logger.info("Job %d archived", job_id)
    return job


# ── Assignments ─────────────────────────────────────────────────────
@router.get("/{company_id}/job-assignments", response_model=list[JobAssignmentRead])
async def list_job_assignments(
    company_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> list[JobAssignment]:
    result = await db.execute(
        select(JobAssignment)
        .where(JobAssignment.company_id == company_id)
        .order_by(JobAssignment.job_id, JobAssignment.user_id)
    )
    return list(result.scalars().all())


@router.post("/{company_id}/job-assignments/toggle", response_model=JobAssignmentRead)
async def toggle_job_assignment(
    company_id: int,
    body: JobAssignmentToggle,
    db: AsyncSession = Depends(get_db),
    admin: CompanyMember = Depends(require_company_admin),
) -> JobAssignment:
    """Assign a member to a job, or flip an existing assignment on/off."""
    await _get_job(db, company_id, body.job_id)
    if await find_membership(db, company_id, body.user_id) is None:
        raise HTTPException(status_code=404, detail="Employee not found")

    result = await db.execute(
        select(JobAssignment).where(
            JobAssignment.job_id == body.job_id,
            JobAssignment.user_id == body.user_id,
        )
    )
    assignment = result.scalar_one_or_none()
    if assignment is None:
        assignment = JobAssignment(
            company_id=company_id,
            job_id=body.job_id,
            user_id=body.user_id,
            is_active=True,
            assigned_by=admin.user_id,
        )
        db.add(assignment)
    else:
        assignment.is_active = not assignment.is_active

    await db.commit()
    await db.refresh(assignment)
    logger.info(
        "Assignment job=%d user=%d is_active=%s",
        body.job_id,
        body.user_id,
        assignment.is_active,
    )
    return assignment
