"""
EmployeeInvitation model: token-bearing offer to join a company.

Lifecycle: pending -> accepted | expired.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Column, DateTime, Float, ForeignKey, Index, Integer,
                        String)

from streamline.db.base import Base


class EmployeeInvitation(Base):
    __tablename__ = "employee_invitations"
    __table_args__ = (Index("ix_invitation_company_email", "company_id", "email"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(320), nullable=False)  # type: ignore[assignment]
    full_name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    role: str = Column(String(20), nullable=False, default="staff")  # type: ignore[assignment]
    pay_rate: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    pay_period: str = Column(String(20), nullable=False, default="hourly")  # type: ignore[assignment]
    token: str = Column(String(64), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="pending")  # type: ignore[assignment]
    invited_by: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    expires_at: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    accepted_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
