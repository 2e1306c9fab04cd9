"""
Company-level rules shared by several routers.

Default-job bookkeeping, the jobs a member may clock into, invitation
creation and subscription plan limits.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.core.config import settings
from streamline.core.constants import (DEFAULT_JOB_NAME, INVITATION_PENDING,
                                       UNLIMITED)
from streamline.core.security import generate_invitation_token
from streamline.core.timeutils import utcnow
from streamline.models.billing import CompanySubscription, SubscriptionPlan
from streamline.models.company import Company, CompanyMember
from streamline.models.invitation import EmployeeInvitation
from streamline.models.job import Job, JobAssignment

logger = logging.getLogger(__name__)


# ── Jobs ────────────────────────────────────────────────────────────
async def ensure_default_job(db: AsyncSession, company: Company) -> Job:
    """Return the company's system default job, creating it when missing.

    Flushes but does not commit; the caller owns the transaction.
    """
    if company.default_job_id is not None:
        job = await db.get(Job, company.default_job_id)
        if job is not None and job.company_id == company.id:
            return job

    result = await db.execute(
        select(Job)
        .where(Job.company_id == company.id, Job.is_system_default.is_(True))
        .order_by(Job.id)
        .limit(1)
    )
    job = result.scalar_one_or_none()
    if job is None:
        job = Job(
            company_id=company.id,
            name=DEFAULT_JOB_NAME,
            is_system_default=True,
        )
        db.add(job)
        await db.flush()
        logger.info("Default job %d created for company %d", job.id, company.id)

    company.default_job_id = job.id
    return job


async def available_jobs(db: AsyncSession, company: Company, member: CompanyMember) -> list[Job]:
    """Jobs *member* may clock into.

    With job tracking off only the default job is offered. Admins see every
    active job. Staff see their active assignments, or every active job when
    they have no assignments at all.
    """
    if not company.job_tracking_enabled:
        return [await ensure_default_job(db, company)]

    active_jobs = (
        select(Job)
        .where(
            Job.company_id == company.id,
            Job.is_archived.is_(False),
            Job.is_system_default.is_(False),
        )
        .order_by(Job.name)
    )
    if member.role == "admin":
        return list((await db.execute(active_jobs)).scalars().all())

    assigned = (
        await db.execute(
            select(JobAssignment.job_id, JobAssignment.is_active).where(
                JobAssignment.company_id == company.id,
                JobAssignment.user_id == member.user_id,
            )
        )
    ).all()
    jobs = list((await db.execute(active_jobs)).scalars().all())
    if not assigned:
        return jobs

    active_ids = {job_id for job_id, is_active in assigned if is_active}
    return [job for job in jobs if job.id in active_ids]


# ── Invitations ─────────────────────────────────────────────────────
async def create_invitation(
    db: AsyncSession,
    company: Company,
    *,
    email: str,
    full_name: str,
    role: str,
    pay_rate: float | None,
    pay_period: str,
    invited_by: int | None,
) -> EmployeeInvitation:
    """Add a pending invitation to the session (flushed, not committed)."""
    invitation = EmployeeInvitation(
        company_id=company.id,
        email=email,
        full_name=full_name,
        role=role,
        pay_rate=company.default_pay_rate if pay_rate is None else pay_rate,
        pay_period=pay_period,
        token=generate_invitation_token(),
        status=INVITATION_PENDING,
        invited_by=invited_by,
        expires_at=utcnow() + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
    )
    db.add(invitation)
    await db.flush()
    return invitation


# ── Plan limits ─────────────────────────────────────────────────────
async def get_subscription(
    db: AsyncSession, company_id: int
) -> tuple[CompanySubscription, SubscriptionPlan] | None:
    result = await db.execute(
        select(CompanySubscription, SubscriptionPlan)
        .join(SubscriptionPlan, SubscriptionPlan.id == CompanySubscription.plan_id)
        .where(CompanySubscription.company_id == company_id)
    )
    row = result.first()
    return None if row is None else (row[0], row[1])


async def count_employees(db: AsyncSession, company_id: int) -> int:
    """Members plus pending invitations."""
    members = await db.scalar(
        select(func.count(CompanyMember.id)).where(CompanyMember.company_id == company_id)
    )
    pending = await db.scalar(
        select(func.count(EmployeeInvitation.id)).where(
            EmployeeInvitation.company_id == company_id,
            EmployeeInvitation.status == INVITATION_PENDING,
        )
    )
    return (members or 0) + (pending or 0)


async def count_jobs(db: AsyncSession, company_id: int) -> int:
    """Non-archived jobs, excluding the system default."""
    total = await db.scalar(
        select(func.count(Job.id)).where(
            Job.company_id == company_id,
            Job.is_archived.is_(False),
            Job.is_system_default.is_(False),
        )
    )
    return total or 0


def _over_limit(limit: int, current: int, adding: int) -> bool:
    return limit != UNLIMITED and current + adding > limit


async def enforce_employee_limit(db: AsyncSession, company_id: int, adding: int = 1) -> None:
    found = await get_subscription(db, company_id)
    if found is None:
        return
    _sub, plan = found
    current = await count_employees(db, company_id)
    if _over_limit(plan.max_employees, current, adding):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=f"Your {plan.name} plan allows up to {plan.max_employees} employees. "
            "Upgrade your plan to add more.",
        )


async def enforce_job_limit(db: AsyncSession, company_id: int, adding: int = 1) -> None:
    found = await get_subscription(db, company_id)
    if found is None:
        return
    _sub, plan = found
    current = await count_jobs(db, company_id)
    if _over_limit(plan.max_jobs, current, adding):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=f"Your {plan.name} plan allows up to {plan.max_jobs} jobs. "
            "Upgrade your plan to add more.",
        )
