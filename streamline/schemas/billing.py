"""Pydantic schemas for plans, subscriptions and mock checkout."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from streamline.core.constants import BILLING_CYCLES


class PlanRead(BaseModel):
    id: int
    name: str
    description: str | None
    price_monthly: float
    price_yearly: float
    max_employees: int
    max_jobs: int
    features: dict
    sort_order: int

    model_config = {"from_attributes": True}


class SubscriptionInfo(BaseModel):
    company_id: int
    plan_id: int
    plan_name: str
    plan_description: str | None
    status: str
    billing_cycle: str
    max_employees: int
    max_jobs: int
    current_employees: int
    current_jobs: int
    features: dict
    current_period_end: datetime | None
    trial_end: datetime | None


class CheckoutRequest(BaseModel):
    company_id: int
    plan_id: int
    billing_cycle: str = "monthly"

    @field_validator("billing_cycle")
    @classmethod
    def _cycle(cls, v: str) -> str:
        if v not in BILLING_CYCLES:
            raise ValueError(f"Billing cycle must be one of: {', '.join(BILLING_CYCLES)}")
        return v


class CheckoutSession(BaseModel):
    id: str
    url: str


class PortalRequest(BaseModel):
    company_id: int


class PortalSession(BaseModel):
    url: str
