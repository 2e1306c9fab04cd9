"""Pydantic schemas for sign-up and the user profile."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from streamline.core.constants import ADMIN_TITLES

MIN_PASSWORD_LENGTH = 8


def normalise_email(v: str) -> str:
    v = v.strip().lower()
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError("Invalid email address")
    return v


def _check_password(v: str) -> str:
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return v


class UserCreate(BaseModel):
    email: str
    password: str
    full_name: str
    phone: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("full_name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name must not be empty")
        if len(v) > 200:
            raise ValueError("Full name must not exceed 200 characters")
        return v


class UserRead(BaseModel):
    id: int
    email: str
    full_name: str | None
    phone: str | None = None
    job_title: str | None = None
    is_active: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    job_title: str | None = None
    password: str | None = None

    @field_validator("job_title")
    @classmethod
    def _job_title(cls, v: str | None) -> str | None:
        if v is not None and v not in ADMIN_TITLES:
            raise ValueError(f"Job title must be one of: {', '.join(ADMIN_TITLES)}")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str | None) -> str | None:
        return None if v is None else _check_password(v)


class UserCompany(BaseModel):
    company_id: int
    company_name: str
    role: str


class UserContext(BaseModel):
    user: UserRead
    companies: list[UserCompany]
