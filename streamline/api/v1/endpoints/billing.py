"""
Subscription plans and mocked checkout / customer portal sessions.

No payment processor is called: checkout records the requested plan on the
company's subscription and hands back a session pointing at the web app.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.api.v1.deps import (get_current_active_user, get_db,
                                    get_membership, load_membership)
from streamline.core.config import settings
from streamline.core.timeutils import utcnow
from streamline.models.billing import CompanySubscription, SubscriptionPlan
from streamline.models.company import CompanyMember
from streamline.models.user import User
from streamline.schemas.billing import (CheckoutRequest, CheckoutSession,
                                        PlanRead, PortalRequest, PortalSession,
                                        SubscriptionInfo)
from streamline.services.company import (count_employees, count_jobs,
                                         get_subscription)

router = APIRouter(tags=["billing"])
logger = logging.getLogger(__name__)


async def _require_admin_of(db: AsyncSession, company_id: int, user: User) -> CompanyMember:
    member = await load_membership(db, company_id, user)
    if member.role != "admin":
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return member


def _app_url(path: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}{path}"


@router.get("/billing/plans", response_model=list[PlanRead])
async def list_plans(db: AsyncSession = Depends(get_db)) -> list[SubscriptionPlan]:
    result = await db.execute(
        select(SubscriptionPlan)
        .where(SubscriptionPlan.is_active.is_(True))
        .order_by(SubscriptionPlan.sort_order, SubscriptionPlan.id)
    )
    return list(result.scalars().all())


@router.get("/companies/{company_id}/subscription", response_model=SubscriptionInfo)
async def read_subscription(
    company_id: int,
    db: AsyncSession = Depends(get_db),
    _member: CompanyMember = Depends(get_membership),
) -> SubscriptionInfo:
    """Plan, status, limits and current usage for the company."""
    found = await get_subscription(db, company_id)
    if found is None:
        raise HTTPException(status_code=404, detail="No subscription found")
    subscription, plan = found

    return SubscriptionInfo(
        company_id=company_id,
        plan_id=plan.id,
        plan_name=plan.name,
        plan_description=plan.description,
        status=subscription.status,
        billing_cycle=subscription.billing_cycle,
        max_employees=plan.max_employees,
        max_jobs=plan.max_jobs,
        current_employees=await count_employees(db, company_id),
        current_jobs=await count_jobs(db, company_id),
        features=plan.features or {},
        current_period_end=subscription.current_period_end,
        trial_end=subscription.trial_end,
    )


@router.post("/billing/checkout-session", response_model=CheckoutSession)
async def create_checkout_session(
    body: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> CheckoutSession:
    """Switch the company to *plan_id* and return a mock checkout session."""
    await _require_admin_of(db, body.company_id, current_user)

    plan = await db.get(SubscriptionPlan, body.plan_id)
    if plan is None or not plan.is_active:
        raise HTTPException(status_code=404, detail="Plan not found")

    result = await db.execute(
        select(CompanySubscription).where(CompanySubscription.company_id == body.company_id)
    )
    subscription = result.scalar_one_or_none()
    if subscription is None:
        db.add(
            CompanySubscription(
                company_id=body.company_id,
                plan_id=plan.id,
                status="incomplete",
                billing_cycle=body.billing_cycle,
            )
        )
    else:
        subscription.plan_id = plan.id
        subscription.billing_cycle = body.billing_cycle
        subscription.updated_at = utcnow()
    await db.commit()

    session_id = f"cs_test_{int(utcnow().timestamp() * 1000)}"
    logger.info(
        "Checkout session %s: company %d -> plan %s (%s)",
        session_id,
        body.company_id,
        plan.name,
        body.billing_cycle,
    )
    return CheckoutSession(
        id=session_id,
        url=_app_url(f"/billing/success?session_id={session_id}"),
    )


@router.post("/billing/portal-session", response_model=PortalSession)
async def create_portal_session(
    body: PortalRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PortalSession:
    await _require_admin_of(db, body.company_id, current_user)

    found = await get_subscription(db, body.company_id)
    if found is None:
        raise HTTPException(status_code=404, detail="No subscription found")
    subscription, _plan = found

    customer = subscription.stripe_customer_id or "mock_customer"
    return PortalSession(url=_app_url(f"/billing/portal?customer={customer}"))
