"""Pydantic schemas for jobs and job assignments."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator


def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Job name must not be empty")
    if len(v) > 200:
        raise ValueError("Job name must not exceed 200 characters")
    return v


class JobCreate(BaseModel):
    name: str
    address: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator("address")
    @classmethod
    def _address(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class JobUpdate(BaseModel):
    name: str | None = None
    address: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return None if v is None else _clean_name(v)


class JobRead(BaseModel):
    id: int
    company_id: int
    name: str
    address: str | None
    is_archived: bool
    is_system_default: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class JobAssignmentToggle(BaseModel):
    job_id: int
    user_id: int


class JobAssignmentRead(BaseModel):
    id: int
    company_id: int
    job_id: int
    user_id: int
    is_active: bool
    assigned_by: int | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class JobSelectionRequired(BaseModel):
    required: bool
