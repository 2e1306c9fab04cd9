"""Tests for payroll, CSV export, daily summary and the detailed report."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from streamline.models.job import Job
from streamline.models.timesheet import Timesheet

API = "/api/v1"

# 2026-01-15 in America/Chicago (UTC-6)
DAY_START = datetime(2026, 1, 15, 14, 0, tzinfo=timezone.utc)  # 08:00 local


@pytest.fixture
async def shifts(db_session, company, admin_user, staff_user):
    """Bob: 8h + 4h on the 15th, Alice: 2h on the 15th, plus noise outside the range."""
    job = Job(company_id=company["id"], name="Warehouse")
    db_session.add(job)
    await db_session.flush()

    def ts(user, start, hours, job_id=company["default_job_id"], **extra):
        return Timesheet(
            company_id=company["id"],
            staff_id=user.id,
            job_id=job_id,
            clock_in=start,
            clock_out=None if hours is None else start + timedelta(hours=hours),
            **extra,
        )

    db_session.add_all([
        ts(staff_user, DAY_START, 8, clock_in_latitude=30.1, clock_in_longitude=-97.2),
        ts(staff_user, DAY_START + timedelta(hours=9), 4, job_id=job.id),
        ts(admin_user, DAY_START + timedelta(hours=1), 2),
        # open shift on the same day: never paid
        ts(admin_user, DAY_START + timedelta(hours=5), None),
        # 2026-01-16 03:00 UTC is still the 15th in Chicago
        ts(staff_user, datetime(2026, 1, 16, 3, 0, tzinfo=timezone.utc), 1),
        # 2026-01-14 local
        ts(staff_user, DAY_START - timedelta(days=1), 5),
    ])
    await db_session.commit()
    return job


@pytest.mark.asyncio
async def test_payroll_for_period(async_client: AsyncClient, company, admin_headers, shifts):
    """Hours and wages per member, closed shifts only, local calendar days."""
    resp = await async_client.get(
        f"{API}/companies/{company['id']}/payroll",
        params={"start_date": "2026-01-15", "end_date": "2026-01-15"},
        headers=admin_headers,
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["time_zone"] == "America/Chicago"
    assert data["currency"] == "USD"

    lines = {line["full_name"]: line for line in data["lines"]}
    assert lines["Bob Builder"]["total_hours"] == 13.0
    assert lines["Bob Builder"]["pay_rate"] == 20.0
    assert lines["Bob Builder"]["total_wage"] == 260.0
    assert lines["Alice Admin"]["total_hours"] == 2.0
    assert lines["Alice Admin"]["total_wage"] == 37.0  # 18.50/h admin rate
    assert data["total_hours"] == 15.0
    assert data["total_wage"] == 297.0
    assert [line["full_name"] for line in data["lines"]] == ["Alice Admin", "Bob Builder"]


@pytest.mark.asyncio
async def test_payroll_inclusive_range(async_client: AsyncClient, company, admin_headers, shifts):
    """A two-day range includes both end dates."""
    resp = await async_client.get(
        f"{API}/companies/{company['id']}/payroll",
        params={"start_date": "2026-01-14", "end_date": "2026-01-15"},
        headers=admin_headers,
    )
    bob = next(line for line in resp.json()["lines"] if line["full_name"] == "Bob Builder")
    assert bob["total_hours"] == 18.0


@pytest.mark.asyncio
async def test_payroll_rejects_inverted_range(async_client: AsyncClient, company, admin_headers):
    """start_date after end_date returns 400."""
    resp = await async_client.get(
        f"{API}/companies/{company['id']}/payroll",
        params={"start_date": "2026-01-16", "end_date": "2026-01-15"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_payroll_admin_only(async_client: AsyncClient, company, staff_headers):
    """Staff cannot run payroll."""
    resp = await async_client.get(
        f"{API}/companies/{company['id']}/payroll",
        params={"start_date": "2026-01-15", "end_date": "2026-01-15"},
        headers=staff_headers,
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_payroll_empty_period(async_client: AsyncClient, company, admin_headers):
    """No shifts means no lines and zero totals."""
    resp = await async_client.get(
        f"{API}/companies/{company['id']}/payroll",
        params={"start_date": "2025-01-01", "end_date": "2025-01-31"},
        headers=admin_headers,
    )
    assert resp.json()["lines"] == []
    assert resp.json()["total_wage"] == 0


@pytest.mark.asyncio
async def test_payroll_csv(async_client: AsyncClient, company, admin_headers, shifts):
    """The CSV export carries one row per member plus a total row."""
    resp = await async_client.get(
        f"{API}/companies/{company['id']}/payroll/csv",
        params={"start_date": "2026-01-15", "end_date": "2026-01-15"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "payroll_2026-01-15_2026-01-15.csv" in resp.headers["content-disposition"]
    rows = [line.split(",") for line in resp.text.strip().splitlines()]
    assert rows[0] == ["staff_id", "full_name", "total_hours", "pay_rate", "total_wage"]
    assert rows[-1][1:] == ["TOTAL", "15.00", "", "297.00"]


@pytest.mark.asyncio
async def test_daily_summary(async_client: AsyncClient, company, admin_headers, shifts):
    """Totals, staff count and distinct job names for one day."""
    resp = await async_client.get(
        f"{API}/companies/{company['id']}/reports/daily-summary",
        params={"date": "2026-01-15"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_hours"] == 15.0
    assert data["total_cost"] == 297.0
    assert data["staff_count"] == 2
    assert sorted(data["jobs_worked"]) == ["General Work", "Warehouse"]


@pytest.mark.asyncio
async def test_detailed_timesheet_report(async_client: AsyncClient, company, admin_headers, staff_user, shifts):
    """The detailed report lists every shift, filterable by staff member."""
    url = f"{API}/companies/{company['id']}/reports/timesheets"
    params = {"start_date": "2026-01-15", "end_date": "2026-01-15"}

    everything = (await async_client.get(url, params=params, headers=admin_headers)).json()
    assert len(everything) == 5  # includes the open shift

    bob = (await async_client.get(url, params={**params, "staff_id": staff_user.id}, headers=admin_headers)).json()
    assert len(bob) == 3
    assert bob[0]["clock_in_location"] == "30.100000, -97.200000"
    assert bob[0]["clock_out_location"] == ""
    assert bob[0]["total_wage"] == 160.0


@pytest.mark.asyncio
async def test_removed_member_keeps_history(
    async_client: AsyncClient, company, admin_headers, staff_user, shifts
):
    """After removal a member's shifts still appear, paid at the company default rate."""
    await async_client.delete(f"{API}/companies/{company['id']}/employees/{staff_user.id}", headers=admin_headers)
    resp = await async_client.get(
        f"{API}/companies/{company['id']}/payroll",
        params={"start_date": "2026-01-15", "end_date": "2026-01-15"},
        headers=admin_headers,
    )
    bob = next(line for line in resp.json()["lines"] if line["full_name"] == "Bob Builder")
    assert bob["pay_rate"] == 18.5


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    """Health endpoint is public and reports database state."""
    resp = await async_client.get(f"{API}/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["database"] == "ok"
    assert data["status"] == "ok"
    assert data["redis"] in ("ok", "error")
