"""Response models for payroll and reporting endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class PayrollLine(BaseModel):
    staff_id: int
    full_name: str
    total_hours: float
    pay_rate: float
    total_wage: float


class PayrollResponse(BaseModel):
    company_id: int
    start_date: date
    end_date: date
    time_zone: str
    currency: str
    lines: list[PayrollLine]
    total_hours: float
    total_wage: float


class DailySummary(BaseModel):
    date: date
    total_hours: float
    total_cost: float
    staff_count: int
    jobs_worked: list[str]


class TimesheetReportEntry(BaseModel):
    timesheet_id: int
    staff_id: int
    staff_name: str
    job_name: str | None
    clock_in: datetime
    clock_out: datetime | None
    total_hours: float
    pay_rate: float
    total_wage: float
    clock_in_location: str
    clock_out_location: str


class HealthResponse(BaseModel):
    status: str
    database: str
    redis: str
    version: str
