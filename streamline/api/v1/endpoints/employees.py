"""
Company member management (admin only).

The employees tab lists members and pending invitations side by side.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.api.v1.deps import get_db, require_company_admin
from streamline.core.constants import INVITATION_PENDING
from streamline.core.timeutils import ensure_utc, hours_between, period_window
from streamline.models.company import Company, CompanyMember
from streamline.models.invitation import EmployeeInvitation
from streamline.models.job import JobAssignment
from streamline.models.timesheet import Timesheet
from streamline.models.user import User
from streamline.schemas.company import (DeleteResponse, EmployeeListItem,
                                        MemberDetail, MemberRead, MemberUpdate,
                                        StaffOption)

router = APIRouter(prefix="/companies", tags=["employees"])
logger = logging.getLogger(__name__)


async def _get_member_row(db: AsyncSession, company_id: int, user_id: int) -> tuple[CompanyMember, User]:
    result = await db.execute(
        select(CompanyMember, User)
        .join(User, User.id == CompanyMember.user_id)
        .where(CompanyMember.company_id == company_id, CompanyMember.user_id == user_id)
    )
    row = result.first()
    if row is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    return row[0], row[1]


def _member_read(member: CompanyMember, user: User) -> MemberRead:
    return MemberRead(
        user_id=member.user_id,
        company_id=member.company_id,
        full_name=user.full_name,
        email=user.email,
        role=member.role,
        pay_rate=member.pay_rate,
        pay_period=member.pay_period,
        created_at=member.created_at,
    )


@router.get("/{company_id}/employees", response_model=list[EmployeeListItem])
async def list_employees(
    company_id: int,
    status_filter: str = Query("all", alias="status", pattern="^(all|active|pending)$"),
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> list[EmployeeListItem]:
    """Members (``active``) followed by pending invitations (``pending``)."""
    items: list[EmployeeListItem] = []

    if status_filter in ("all", "active"):
        result = await db.execute(
            select(CompanyMember, User)
            .join(User, User.id == CompanyMember.user_id)
            .where(CompanyMember.company_id == company_id)
            .order_by(User.full_name, User.id)
        )
        items.extend(
            EmployeeListItem(
                id=user.id,
                type="employee",
                full_name=user.full_name,
                email=user.email,
                role=member.role,
                pay_rate=member.pay_rate,
                pay_period=member.pay_period,
                status="active",
            )
            for member, user in result.all()
        )

    if status_filter in ("all", "pending"):
        result = await db.execute(
            select(EmployeeInvitation)
            .where(
                EmployeeInvitation.company_id == company_id,
                EmployeeInvitation.status == INVITATION_PENDING,
            )
            .order_by(EmployeeInvitation.created_at.desc(), EmployeeInvitation.id.desc())
        )
        items.extend(
            EmployeeListItem(
                id=inv.id,
                type="invitation",
                full_name=inv.full_name,
                email=inv.email,
                role=inv.role,
                pay_rate=inv.pay_rate,
                pay_period=inv.pay_period,
                status=INVITATION_PENDING,
            )
            for inv in result.scalars().all()
        )

    return items


@router.get("/{company_id}/employees/{user_id}", response_model=MemberDetail)
async def read_employee(
    company_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> MemberDetail:
    """Member profile with lifetime and current-week hour totals."""
    member, user = await _get_member_row(db, company_id, user_id)
    company = await db.get(Company, company_id)
    week_start, _now = period_window("week", company.time_zone)

    # Single query, aggregate in Python
    result = await db.execute(
        select(Timesheet.clock_in, Timesheet.clock_out).where(
            Timesheet.company_id == company_id,
            Timesheet.staff_id == user_id,
        )
    )
    total_hours = 0.0
    week_hours = 0.0
    total_shifts = 0
    clocked_in = False
    for clock_in, clock_out in result.all():
        total_shifts += 1
        if clock_out is None:
            clocked_in = True
            continue
        hours = hours_between(clock_in, clock_out)
        total_hours += hours
        if ensure_utc(clock_in) >= week_start:
            week_hours += hours

    assigned = await db.execute(
        select(JobAssignment.job_id)
        .where(
            JobAssignment.company_id == company_id,
            JobAssignment.user_id == user_id,
            JobAssignment.is_active.is_(True),
        )
        .order_by(JobAssignment.job_id)
    )

    return MemberDetail(
        **_member_read(member, user).model_dump(),
        phone=user.phone,
        total_hours=round(total_hours, 2),
        hours_this_week=round(week_hours, 2),
        total_shifts=total_shifts,
        is_clocked_in=clocked_in,
        assigned_job_ids=list(assigned.scalars().all()),
    )


@router.put("/{company_id}/employees/{user_id}", response_model=MemberRead)
async def update_employee(
    company_id: int,
    user_id: int,
    body: MemberUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> MemberRead:
    """Change pay rate, pay period or role."""
    member, user = await _get_member_row(db, company_id, user_id)
    data = body.model_dump(exclude_unset=True, exclude_none=True)

    if member.role == "admin" and data.get("role", "admin") != "admin":
        admins = await db.scalar(
            select(func.count(CompanyMember.id)).where(
                CompanyMember.company_id == company_id,
                CompanyMember.role == "admin",
            )
        )
        if admins <= 1:
            raise HTTPException(status_code=400, detail="A company must keep at least one admin")

    for field, value in data.items():
        setattr(member, field, value)
    await db.commit()
    await db.refresh(member)

    logger.info("Member %d of company %d updated: %s", user_id, company_id, ", ".join(sorted(data)))
    return _member_read(member, user)


@router.delete("/{company_id}/employees/{user_id}", response_model=DeleteResponse)
async def remove_employee(
    company_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: CompanyMember = Depends(require_company_admin),
) -> DeleteResponse:
    """Remove a member from the company. Their timesheets are kept for payroll history."""
    if user_id == admin.user_id:
        raise HTTPException(status_code=400, detail="You cannot remove yourself from the company")

    member, user = await _get_member_row(db, company_id, user_id)
    await db.execute(
        sa_delete(JobAssignment).where(
            JobAssignment.company_id == company_id,
            JobAssignment.user_id == user_id,
        )
    )
    await db.delete(member)
    await db.commit()

    logger.info("Member %d removed from company %d by %d", user_id, company_id, admin.user_id)
    return DeleteResponse(success=True, message=f"{user.full_name or user.email} removed from company")


@router.get("/{company_id}/staff", response_model=list[StaffOption])
async def list_staff(
    company_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> list[StaffOption]:
    """Lightweight member list for report filters."""
    result = await db.execute(
        select(User.id, User.full_name, User.email, CompanyMember.role)
        .join(CompanyMember, CompanyMember.user_id == User.id)
        .where(CompanyMember.company_id == company_id)
        .order_by(User.full_name, User.id)
    )
    return [
        StaffOption(staff_id=uid, staff_name=name or email, role=role)
        for uid, name, email, role in result.all()
    ]
