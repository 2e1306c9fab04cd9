"""
Employee invitation endpoints.

Admins create and revoke invitations; invitees preview them by token
(no auth) and accept them once signed in.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.api.v1.deps import (find_membership, get_current_active_user,
                                    get_db, require_company_admin)
from streamline.core.constants import (INVITATION_ACCEPTED, INVITATION_EXPIRED,
                                       INVITATION_PENDING, INVITATION_STATUSES)
from streamline.core.email import send_employee_invitation
from streamline.core.timeutils import ensure_utc, utcnow
from streamline.models.company import Company, CompanyMember
from streamline.models.invitation import EmployeeInvitation
from streamline.models.user import User
from streamline.schemas.invitation import (InvitationAccepted,
                                           InvitationCreate, InvitationPreview,
                                           InvitationRead)
from streamline.services.company import (create_invitation,
                                         enforce_employee_limit)

router = APIRouter(tags=["invitations"])
logger = logging.getLogger(__name__)


async def _get_by_token(db: AsyncSession, token: str) -> EmployeeInvitation:
    result = await db.execute(
        select(EmployeeInvitation).where(EmployeeInvitation.token == token)
    )
    invitation = result.scalar_one_or_none()
    if invitation is None:
        raise HTTPException(status_code=404, detail="Invalid or expired invitation")
    return invitation


# ── Admin side ──────────────────────────────────────────────────────
@router.post(
    "/companies/{company_id}/invitations",
    response_model=InvitationRead,
    status_code=201,
)
async def invite_employee(
    company_id: int,
    body: InvitationCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    admin: CompanyMember = Depends(require_company_admin),
    current_user: User = Depends(get_current_active_user),
) -> EmployeeInvitation:
    """Invite someone by e-mail; the link in the e-mail carries the token."""
    company = await db.get(Company, company_id)

    already_member = await db.execute(
        select(CompanyMember.id)
        .join(User, User.id == CompanyMember.user_id)
        .where(CompanyMember.company_id == company_id, User.email == body.email)
    )
    if already_member.first() is not None:
        raise HTTPException(status_code=409, detail="This person is already a member of the company")

    pending = await db.execute(
        select(EmployeeInvitation.id).where(
            EmployeeInvitation.company_id == company_id,
            EmployeeInvitation.email == body.email,
            EmployeeInvitation.status == INVITATION_PENDING,
        )
    )
    if pending.first() is not None:
        raise HTTPException(status_code=409, detail="A pending invitation already exists for this email")

    await enforce_employee_limit(db, company_id)

    invitation = await create_invitation(
        db,
        company,
        email=body.email,
        full_name=body.full_name,
        role=body.role,
        pay_rate=body.pay_rate,
        pay_period=body.pay_period,
        invited_by=admin.user_id,
    )
    await db.commit()
    await db.refresh(invitation)

    background_tasks.add_task(
        send_employee_invitation,
        invitation.email,
        invitation.full_name,
        company.name,
        invitation.role,
        invitation.token,
        current_user.full_name or current_user.email,
    )
    logger.info("Invitation %d created for company %d", invitation.id, company_id)
    return invitation


@router.get("/companies/{company_id}/invitations", response_model=list[InvitationRead])
async def list_invitations(
    company_id: int,
    status_filter: str | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> list[EmployeeInvitation]:
    if status_filter is not None and status_filter not in INVITATION_STATUSES:
        raise HTTPException(
            status_code=422,
            detail=f"status must be one of: {', '.join(INVITATION_STATUSES)}",
        )

    stmt = select(EmployeeInvitation).where(EmployeeInvitation.company_id == company_id)
    if status_filter:
        stmt = stmt.where(EmployeeInvitation.status == status_filter)
    result = await db.execute(
        stmt.order_by(EmployeeInvitation.created_at.desc(), EmployeeInvitation.id.desc())
    )
    return list(result.scalars().all())


@router.delete("/companies/{company_id}/invitations/{invitation_id}", response_model=InvitationRead)
async def revoke_invitation(
    company_id: int,
    invitation_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> EmployeeInvitation:
    """Withdraw a pending invitation; the token stops working immediately."""
    invitation = await db.get(EmployeeInvitation, invitation_id)
    if invitation is None or invitation.company_id != company_id:
        raise HTTPException(status_code=404, detail="Invitation not found")
    if invitation.status != INVITATION_PENDING:
        raise HTTPException(status_code=409, detail="Only pending invitations can be revoked")

    invitation.status = INVITATION_EXPIRED
    await db.commit()
    await db.refresh(invitation)
    logger.info("Invitation %d revoked", invitation_id)
    return invitation


# ── Invitee side ────────────────────────────────────────────────────
@router.get("/invitations/{token}", response_model=InvitationPreview)
async def preview_invitation(
    token: str,
    db: AsyncSession = Depends(get_db),
) -> InvitationPreview:
    """Public: what the invite link shows before sign-in."""
    invitation = await _get_by_token(db, token)
    company = await db.get(Company, invitation.company_id)
    return InvitationPreview(
        id=invitation.id,
        company_name=company.name,
        full_name=invitation.full_name,
        email=invitation.email,
        role=invitation.role,
        pay_rate=invitation.pay_rate,
        pay_period=invitation.pay_period,
        status=invitation.status,
        expires_at=invitation.expires_at,
    )


@router.post("/invitations/{token}/accept", response_model=InvitationAccepted)
async def accept_invitation(
    token: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> InvitationAccepted:
    """Join the inviting company.

    Checks run in order: token, status, expiry, e-mail match. The status
    change and the membership insert are committed together.
    """
    invitation = await _get_by_token(db, token)

    if invitation.status != INVITATION_PENDING:
        raise HTTPException(status_code=410, detail="This invitation has already been used or expired")

    if ensure_utc(invitation.expires_at) <= utcnow():
        invitation.status = INVITATION_EXPIRED
        await db.commit()
        raise HTTPException(status_code=410, detail="This invitation has expired")

    if current_user.email.lower() != invitation.email.lower():
        raise HTTPException(
            status_code=403,
            detail="This invitation was sent to a different email address",
        )

    if await find_membership(db, invitation.company_id, current_user.id) is not None:
        raise HTTPException(status_code=409, detail="You are already a member of this company")

    invitation.status = INVITATION_ACCEPTED
    invitation.accepted_at = utcnow()
    db.add(
        CompanyMember(
            company_id=invitation.company_id,
            user_id=current_user.id,
            role=invitation.role,
            pay_rate=invitation.pay_rate,
            pay_period=invitation.pay_period,
        )
    )
    await db.commit()

    company = await db.get(Company, invitation.company_id)
    logger.info(
        "Invitation %d accepted by user %d (company %d)",
        invitation.id,
        current_user.id,
        invitation.company_id,
    )
    return InvitationAccepted(
        success=True,
        company_id=company.id,
        company_name=company.name,
        role=invitation.role,
    )
