"""
Payroll & reporting endpoints.

Each endpoint fetches the period's timesheets in **one** query and
aggregates in Python (see ``streamline.services.payroll``). Dates are
calendar days in the company's time zone, both ends inclusive.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.api.v1.deps import get_db, require_company_admin
from streamline.core.config import settings
from streamline.core.timeutils import day_window, get_zone, utcnow
from streamline.models.company import Company, CompanyMember
from streamline.models.job import Job
from streamline.models.timesheet import Timesheet
from streamline.models.user import User
from streamline.schemas.report import (DailySummary, HealthResponse,
                                       PayrollLine, PayrollResponse,
                                       TimesheetReportEntry)
from streamline.services.payroll import (WorkedShift, calculate_payroll,
                                         detailed_entries, summarize_day)

router = APIRouter(tags=["reports"])
logger = logging.getLogger(__name__)


# ── Helpers ─────────────────────────────────────────────────────────
def _check_range(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")


async def _load_shifts(
    db: AsyncSession,
    company: Company,
    start_date: date,
    end_date: date,
    *,
    staff_id: int | None = None,
    closed_only: bool = True,
) -> list[WorkedShift]:
    """Shifts that started inside the window, with name, job and pay rate."""
    lo, hi = day_window(start_date, end_date, company.time_zone)

    stmt = (
        select(Timesheet, User.full_name, User.email, Job.name, CompanyMember.pay_rate)
        .join(User, User.id == Timesheet.staff_id)
        .outerjoin(Job, Job.id == Timesheet.job_id)
        .outerjoin(
            CompanyMember,
            and_(
                CompanyMember.company_id == Timesheet.company_id,
                CompanyMember.user_id == Timesheet.staff_id,
            ),
        )
        .where(
            Timesheet.company_id == company.id,
            Timesheet.clock_in >= lo,
            Timesheet.clock_in < hi,
        )
        .order_by(Timesheet.clock_in)
    )
    if staff_id is not None:
        stmt = stmt.where(Timesheet.staff_id == staff_id)
    if closed_only:
        stmt = stmt.where(Timesheet.clock_out.is_not(None))

    result = await db.execute(stmt)
    return [
        WorkedShift(
            timesheet_id=ts.id,
            staff_id=ts.staff_id,
            staff_name=full_name or email,
            job_name=job_name,
            # removed members keep their history at the company default rate
            pay_rate=company.default_pay_rate if pay_rate is None else pay_rate,
            clock_in=ts.clock_in,
            clock_out=ts.clock_out,
            clock_in_latitude=ts.clock_in_latitude,
            clock_in_longitude=ts.clock_in_longitude,
            clock_out_latitude=ts.clock_out_latitude,
            clock_out_longitude=ts.clock_out_longitude,
        )
        for ts, full_name, email, job_name, pay_rate in result.all()
    ]


async def _payroll(
    db: AsyncSession, company_id: int, start_date: date, end_date: date
) -> PayrollResponse:
    _check_range(start_date, end_date)
    company = await db.get(Company, company_id)
    lines = [
        PayrollLine(**line)
        for line in calculate_payroll(await _load_shifts(db, company, start_date, end_date))
    ]
    return PayrollResponse(
        company_id=company.id,
        start_date=start_date,
        end_date=end_date,
        time_zone=company.time_zone,
        currency=company.currency,
        lines=lines,
        total_hours=round(sum(line.total_hours for line in lines), 2),
        total_wage=round(sum(line.total_wage for line in lines), 2),
    )


# ── Payroll ─────────────────────────────────────────────────────────
@router.get("/companies/{company_id}/payroll", response_model=PayrollResponse)
async def payroll_for_period(
    company_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> PayrollResponse:
    """Hours, rate and wage per staff member over closed shifts."""
    return await _payroll(db, company_id, start_date, end_date)


@router.get("/companies/{company_id}/payroll/csv")
async def payroll_csv(
    company_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> StreamingResponse:
    """Export the payroll as a CSV file download."""
    report = await _payroll(db, company_id, start_date, end_date)

    def iter_csv():
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(["staff_id", "full_name", "total_hours", "pay_rate", "total_wage"])
        for line in report.lines:
            writer.writerow(
                [line.staff_id, line.full_name, f"{line.total_hours:.2f}",
                 f"{line.pay_rate:.2f}", f"{line.total_wage:.2f}"]
            )
        writer.writerow(["", "TOTAL", f"{report.total_hours:.2f}", "", f"{report.total_wage:.2f}"])
        yield buf.getvalue()

    return StreamingResponse(
        iter_csv(),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename=payroll_{start_date}_{end_date}.csv"
        },
    )


# ── Reports ─────────────────────────────────────────────────────────
@router.get("/companies/{company_id}/reports/daily-summary", response_model=DailySummary)
async def daily_summary(
    company_id: int,
    day: date | None = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> DailySummary:
    """Totals for one company-local day (today by default)."""
    company = await db.get(Company, company_id)
    day = day or utcnow().astimezone(get_zone(company.time_zone)).date()
    summary = summarize_day(await _load_shifts(db, company, day, day))
    return DailySummary(date=day, **summary)


@router.get("/companies/{company_id}/reports/timesheets", response_model=list[TimesheetReportEntry])
async def detailed_timesheets(
    company_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    staff_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _admin: CompanyMember = Depends(require_company_admin),
) -> list[TimesheetReportEntry]:
    """Every shift in the range, open ones included with zero hours."""
    _check_range(start_date, end_date)
    company = await db.get(Company, company_id)
    shifts = await _load_shifts(
        db, company, start_date, end_date, staff_id=staff_id, closed_only=False
    )
    return [TimesheetReportEntry(**entry) for entry in detailed_entries(shifts)]


# ── Health ──────────────────────────────────────────────────────────
@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check: DB and Redis connectivity."""
    database = "ok"
    redis_state = "ok"

    try:
        await db.execute(select(1))
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
        database = "error"

    try:
        import redis.asyncio as aioredis

        r = aioredis.from_url(settings.REDIS_URL)
        await r.ping()
        await r.aclose()
    except Exception as e:
        logger.error("Health check Redis failure: %s", e)
        redis_state = "error"

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        database=database,
        redis=redis_state,
        version=settings.VERSION,
    )
