"""
SubscriptionPlan & CompanySubscription models.

Plans are seeded on start-up; ``-1`` in a limit column means unlimited.
Payment processing is mocked, so the ``stripe_*`` columns stay empty
until a real integration fills them.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (JSON, Boolean, Column, DateTime, Float, ForeignKey,
                        Integer, String)

from streamline.db.base import Base


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(100), unique=True, nullable=False)  # type: ignore[assignment]
    description: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    price_monthly: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    price_yearly: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    max_employees: int = Column(Integer, nullable=False, default=-1)  # type: ignore[assignment]
    max_jobs: int = Column(Integer, nullable=False, default=-1)  # type: ignore[assignment]
    features: dict = Column(JSON, nullable=False, default=dict)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    sort_order: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]


class CompanySubscription(Base):
    __tablename__ = "company_subscriptions"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), unique=True, nullable=False)  # type: ignore[assignment]
    plan_id: int = Column(Integer, ForeignKey("subscription_plans.id"), nullable=False)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="incomplete")  # type: ignore[assignment]
    # active | canceled | past_due | incomplete | trialing
    billing_cycle: str = Column(String(10), nullable=False, default="monthly")  # type: ignore[assignment]
    stripe_customer_id: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    stripe_subscription_id: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    current_period_start: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    current_period_end: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    trial_end: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
