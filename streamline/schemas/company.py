"""Pydantic schemas for onboarding, company settings and members."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field, field_validator

from streamline.core.constants import (ADMIN_TITLES, COMPANY_SIZES, INDUSTRIES,
                                       MEMBER_ROLES, PAY_PERIODS)
from streamline.core.timeutils import is_valid_timezone
from streamline.schemas.user import normalise_email


def _check_timezone(v: str | None) -> str | None:
    if v is not None and not is_valid_timezone(v):
        raise ValueError(f"Unknown time zone: {v}")
    return v


def _check_currency(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise ValueError("Currency must be a 3-letter ISO code")
    return v


def _check_role(v: str | None) -> str | None:
    if v is not None and v not in MEMBER_ROLES:
        raise ValueError(f"Role must be one of: {', '.join(MEMBER_ROLES)}")
    return v


def _check_pay_period(v: str | None) -> str | None:
    if v is not None and v not in PAY_PERIODS:
        raise ValueError(f"Pay period must be one of: {', '.join(PAY_PERIODS)}")
    return v


Role = Annotated[str, AfterValidator(_check_role)]
PayPeriod = Annotated[str, AfterValidator(_check_pay_period)]
TimeZone = Annotated[str, AfterValidator(_check_timezone)]
Currency = Annotated[str, AfterValidator(_check_currency)]


# ── Onboarding ─────────────────────────────────────────────────────
class OnboardingEmployee(BaseModel):
    """Optional invitee row; rows missing email or name are skipped."""

    email: str = ""
    full_name: str = ""
    role: Role = "staff"
    pay_rate: float | None = Field(default=None, ge=0)
    pay_period: PayPeriod = "hourly"

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip()
        return normalise_email(v) if v else v

    @field_validator("full_name")
    @classmethod
    def _name(cls, v: str) -> str:
        return v.strip()


class OnboardingRequest(BaseModel):
    # Company information
    company_name: str
    industry: str
    company_size: str
    address: str
    city: str
    state: str = ""
    postal_code: str = ""
    country: str = "US"
    company_phone: str | None = None
    website: str | None = None

    # Admin profile
    full_name: str
    admin_phone: str | None = None
    job_title: str = "owner"

    # Company settings
    time_zone: TimeZone | None = None
    currency: Currency | None = None
    default_pay_rate: float = Field(default=15.00, ge=0)

    # Team invites
    employees: list[OnboardingEmployee] = Field(default_factory=list)

    @field_validator("company_name", "full_name", "address", "city")
    @classmethod
    def _required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field must not be empty")
        return v

    @field_validator("industry")
    @classmethod
    def _industry(cls, v: str) -> str:
        if v not in INDUSTRIES:
            raise ValueError("Unknown industry")
        return v

    @field_validator("company_size")
    @classmethod
    def _size(cls, v: str) -> str:
        if v not in COMPANY_SIZES:
            raise ValueError(f"Company size must be one of: {', '.join(COMPANY_SIZES)}")
        return v

    @field_validator("country", "state")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("job_title")
    @classmethod
    def _job_title(cls, v: str) -> str:
        if v not in ADMIN_TITLES:
            raise ValueError(f"Job title must be one of: {', '.join(ADMIN_TITLES)}")
        return v


class CompanyRead(BaseModel):
    id: int
    name: str
    industry: str | None
    size: str | None
    address: str | None
    phone: str | None
    website: str | None
    time_zone: str
    currency: str
    default_pay_rate: float
    job_tracking_enabled: bool
    job_selection_required: bool
    default_job_id: int | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class OnboardingResponse(BaseModel):
    company: CompanyRead
    invitations_sent: int
    subscription_status: str | None


class CompanyUpdate(BaseModel):
    name: str | None = None
    industry: str | None = None
    size: str | None = None
    address: str | None = None
    phone: str | None = None
    website: str | None = None
    time_zone: TimeZone | None = None
    currency: Currency | None = None
    default_pay_rate: float | None = Field(default=None, ge=0)
    job_tracking_enabled: bool | None = None
    job_selection_required: bool | None = None

    @field_validator("industry")
    @classmethod
    def _industry(cls, v: str | None) -> str | None:
        if v is not None and v not in INDUSTRIES:
            raise ValueError("Unknown industry")
        return v

    @field_validator("size")
    @classmethod
    def _size(cls, v: str | None) -> str | None:
        if v is not None and v not in COMPANY_SIZES:
            raise ValueError(f"Company size must be one of: {', '.join(COMPANY_SIZES)}")
        return v


# ── Location settings ──────────────────────────────────────────────
class LocationSettingsRead(BaseModel):
    location_tracking_enabled: bool
    location_ping_interval_seconds: int
    location_ping_distance_meters: int
    geofencing_enabled: bool

    model_config = {"from_attributes": True}


class LocationSettingsUpdate(BaseModel):
    location_tracking_enabled: bool | None = None
    location_ping_interval_seconds: int | None = Field(default=None, ge=10, le=3600)
    location_ping_distance_meters: int | None = Field(default=None, ge=0, le=10_000)
    geofencing_enabled: bool | None = None


# ── Members ────────────────────────────────────────────────────────
class EmployeeListItem(BaseModel):
    """A member or a pending invitation, as shown in the employees tab."""

    id: int  # user id for members, invitation id for invitations
    type: Literal["employee", "invitation"]
    full_name: str | None
    email: str | None
    role: str
    pay_rate: float
    pay_period: str
    status: str


class MemberRead(BaseModel):
    user_id: int
    company_id: int
    full_name: str | None = None
    email: str | None = None
    role: str
    pay_rate: float
    pay_period: str
    created_at: datetime | None = None


class MemberDetail(MemberRead):
    phone: str | None = None
    total_hours: float
    hours_this_week: float
    total_shifts: int
    is_clocked_in: bool
    assigned_job_ids: list[int]


class MemberUpdate(BaseModel):
    role: Role | None = None
    pay_rate: float | None = Field(default=None, ge=0)
    pay_period: PayPeriod | None = None


class StaffOption(BaseModel):
    staff_id: int
    staff_name: str
    role: str


class DeleteResponse(BaseModel):
    success: bool
    message: str

