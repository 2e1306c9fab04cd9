"""Pydantic schemas for employee invitations."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from streamline.schemas.company import PayPeriod, Role
from streamline.schemas.user import normalise_email


class InvitationCreate(BaseModel):
    email: str
    full_name: str
    role: Role = "staff"
    pay_rate: float | None = Field(default=None, ge=0)  # company default when omitted
    pay_period: PayPeriod = "hourly"

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)

    @field_validator("full_name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name must not be empty")
        return v


class InvitationRead(BaseModel):
    id: int
    company_id: int
    email: str
    full_name: str
    role: str
    pay_rate: float
    pay_period: str
    status: str
    token: str
    invited_by: int | None
    expires_at: datetime
    accepted_at: datetime | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class InvitationPreview(BaseModel):
    """Public view of an invitation, looked up by token."""

    id: int
    company_name: str
    full_name: str
    email: str
    role: str
    pay_rate: float
    pay_period: str
    status: str
    expires_at: datetime


class InvitationAccepted(BaseModel):
    success: bool
    company_id: int
    company_name: str
    role: str
