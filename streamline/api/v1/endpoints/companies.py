"""
Company onboarding and settings endpoints.

Onboarding is a single request: it creates the company, makes the caller
its first admin, starts the trial subscription and sends the team invites.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.api.v1.deps import (get_company, get_current_active_user,
                                    get_db, require_company_admin)
from streamline.core.config import settings
from streamline.core.constants import (currency_for_country,
                                       timezone_for_location)
from streamline.core.email import send_employee_invitation, send_welcome_email
from streamline.core.timeutils import utcnow
from streamline.models.billing import CompanySubscription, SubscriptionPlan
from streamline.models.company import Company, CompanyMember
from streamline.models.user import User
from streamline.schemas.company import (CompanyRead, CompanyUpdate,
                                        LocationSettingsRead,
                                        LocationSettingsUpdate,
                                        OnboardingEmployee, OnboardingRequest,
                                        OnboardingResponse)
from streamline.services.company import (create_invitation,
                                         enforce_employee_limit,
                                         ensure_default_job)

router = APIRouter(prefix="/companies", tags=["companies"])
logger = logging.getLogger(__name__)


def _format_address(body: OnboardingRequest) -> str:
    region = f"{body.state} {body.postal_code}".strip()
    return ", ".join(part for part in (body.address, body.city, region, body.country) if part)


def _invitee_rows(body: OnboardingRequest, admin_email: str) -> list[OnboardingEmployee]:
    """Complete rows, one per e-mail, never the admin's own address."""
    seen = {admin_email.lower()}
    rows = []
    for row in body.employees:
        if not row.email or not row.full_name or row.email in seen:
            continue
        seen.add(row.email)
        rows.append(row)
    return rows


async def _start_trial(db: AsyncSession, company: Company) -> CompanySubscription | None:
    result = await db.execute(
        select(SubscriptionPlan)
        .where(SubscriptionPlan.is_active.is_(True))
        .order_by(SubscriptionPlan.sort_order, SubscriptionPlan.id)
        .limit(1)
    )
    plan = result.scalar_one_or_none()
    if plan is None:
        logger.warning("No active subscription plan; company %d starts without a trial", company.id)
        return None

    now = utcnow()
    trial_end = now + timedelta(days=settings.TRIAL_DAYS)
    subscription = CompanySubscription(
        company_id=company.id,
        plan_id=plan.id,
        status="trialing",
        billing_cycle="monthly",
        current_period_start=now,
        current_period_end=trial_end,
        trial_end=trial_end,
    )
    db.add(subscription)
    return subscription


# ── Onboarding ──────────────────────────────────────────────────────
@router.post("", response_model=OnboardingResponse, status_code=201)
async def onboard_company(
    body: OnboardingRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> OnboardingResponse:
    """Create a company with the caller as admin, start the trial and invite the team."""
    company = Company(
        name=body.company_name,
        industry=body.industry,
        size=body.company_size,
        address=_format_address(body),
        phone=body.company_phone,
        website=body.website,
        time_zone=body.time_zone or timezone_for_location(body.country, body.state),
        currency=body.currency or currency_for_country(body.country),
        default_pay_rate=body.default_pay_rate,
    )
    db.add(company)
    await db.flush()

    db.add(
        CompanyMember(
            company_id=company.id,
            user_id=current_user.id,
            role="admin",
            pay_rate=body.default_pay_rate,
            pay_period="hourly",
        )
    )

    current_user.full_name = body.full_name
    current_user.phone = body.admin_phone
    current_user.job_title = body.job_title

    await ensure_default_job(db, company)
    subscription = await _start_trial(db, company)

    rows = _invitee_rows(body, current_user.email)
    if rows:
        await enforce_employee_limit(db, company.id, adding=len(rows))

    invitations = []
    for row in rows:
        invitations.append(
            await create_invitation(
                db,
                company,
                email=row.email,
                full_name=row.full_name,
                role=row.role,
                pay_rate=row.pay_rate,
                pay_period=row.pay_period,
                invited_by=current_user.id,
            )
        )

    await db.commit()
    await db.refresh(company)

    inviter = current_user.full_name or current_user.email
    for invitation in invitations:
        background_tasks.add_task(
            send_employee_invitation,
            invitation.email,
            invitation.full_name,
            company.name,
            invitation.role,
            invitation.token,
            inviter,
        )
    background_tasks.add_task(send_welcome_email, current_user.email, company.name)

    logger.info(
        "Company %d onboarded by user %d (%d invitations)",
        company.id,
        current_user.id,
        len(invitations),
    )
    return OnboardingResponse(
        company=CompanyRead.model_validate(company),
        invitations_sent=len(invitations),
        subscription_status=subscription.status if subscription else None,
    )


# ── Company profile ─────────────────────────────────────────────────
@router.get("/{company_id}", response_model=CompanyRead)
async def read_company(company: Company = Depends(get_company)) -> Company:
    return company


@router.put("/{company_id}", response_model=CompanyRead)
async def update_company(
    body: CompanyUpdate,
    company: Company = Depends(get_company),
    _admin: CompanyMember = Depends(require_company_admin),
    db: AsyncSession = Depends(get_db),
) -> Company:
    """Partial update; switching job tracking off pins clock-ins to the default job."""
    data = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in data.items():
        setattr(company, field, value)

    if not company.job_tracking_enabled:
        await ensure_default_job(db, company)

    await db.commit()
    await db.refresh(company)
    logger.info("Company %d updated: %s", company.id, ", ".join(sorted(data)))
    return company


# ── Location settings ───────────────────────────────────────────────
@router.get("/{company_id}/location-settings", response_model=LocationSettingsRead)
async def read_location_settings(company: Company = Depends(get_company)) -> Company:
    return company


@router.put("/{company_id}/location-settings", response_model=LocationSettingsRead)
async def update_location_settings(
    body: LocationSettingsUpdate,
    company: Company = Depends(get_company),
    _admin: CompanyMember = Depends(require_company_admin),
    db: AsyncSession = Depends(get_db),
) -> Company:
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(company, field, value)
    await db.commit()
    await db.refresh(company)
    return company
