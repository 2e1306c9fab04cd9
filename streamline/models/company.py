"""
Company (tenant) and CompanyMember models.

A company owns its members, jobs, invitations, timesheets, geofences and
subscription. Location-tracking settings are stored on the company row.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, Float, ForeignKey, Integer,
                        String, UniqueConstraint)

from streamline.db.base import Base


class Company(Base):
    __tablename__ = "companies"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    industry: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    size: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    address: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    phone: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    website: str | None = Column(String(300), nullable=True)  # type: ignore[assignment]
    time_zone: str = Column(String(64), nullable=False, default="America/New_York")  # type: ignore[assignment]
    currency: str = Column(String(3), nullable=False, default="USD")  # type: ignore[assignment]
    default_pay_rate: float = Column(Float, nullable=False, default=15.0)  # type: ignore[assignment]

    # Job tracking
    job_tracking_enabled: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    job_selection_required: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    default_job_id: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]  # jobs.id, no FK (circular)

    # Location tracking
    location_tracking_enabled: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    location_ping_interval_seconds: int = Column(Integer, nullable=False, default=30)  # type: ignore[assignment]
    location_ping_distance_meters: int = Column(Integer, nullable=False, default=50)  # type: ignore[assignment]
    geofencing_enabled: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class CompanyMember(Base):
    __tablename__ = "company_members"
    __table_args__ = (UniqueConstraint("company_id", "user_id", name="uq_member_company_user"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    role: str = Column(String(20), nullable=False, default="staff")  # type: ignore[assignment]  # admin | staff
    pay_rate: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    pay_period: str = Column(String(20), nullable=False, default="hourly")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
