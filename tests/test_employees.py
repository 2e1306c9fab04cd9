"""Tests for member management and the employees tab."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from streamline.models.timesheet import Timesheet

API = "/api/v1"


@pytest.mark.asyncio
async def test_list_employees_combines_members_and_invitations(
    async_client: AsyncClient, company, admin_headers, staff_user
):
    """Members come back as 'employee/active', pending invites as 'invitation/pending'."""
    await async_client.post(
        f"{API}/companies/{company['id']}/invitations",
        json={"email": "carol@example.com", "full_name": "Carol"},
        headers=admin_headers,
    )
    url = f"{API}/companies/{company['id']}/employees"

    everyone = (await async_client.get(url, headers=admin_headers)).json()
    assert {(e["type"], e["status"], e["email"]) for e in everyone} == {
        ("employee", "active", "alice@acme.test"),
        ("employee", "active", "bob@acme.test"),
        ("invitation", "pending", "carol@example.com"),
    }

    active = (await async_client.get(url, params={"status": "active"}, headers=admin_headers)).json()
    assert all(e["type"] == "employee" for e in active)
    pending = (await async_client.get(url, params={"status": "pending"}, headers=admin_headers)).json()
    assert [e["email"] for e in pending] == ["carol@example.com"]


@pytest.mark.asyncio
async def test_list_employees_admin_only(async_client: AsyncClient, company, staff_headers):
    """Staff cannot see the employee list."""
    resp = await async_client.get(f"{API}/companies/{company['id']}/employees", headers=staff_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_employee_detail_totals(
    async_client: AsyncClient, db_session, company, admin_headers, staff_user
):
    """Detail view sums closed shifts and flags an open one."""
    now = datetime.now(timezone.utc)
    db_session.add_all([
        Timesheet(company_id=company["id"], staff_id=staff_user.id, job_id=company["default_job_id"],
                  clock_in=now - timedelta(days=40, hours=8), clock_out=now - timedelta(days=40)),
        Timesheet(company_id=company["id"], staff_id=staff_user.id, job_id=company["default_job_id"],
                  clock_in=now - timedelta(hours=3), clock_out=now - timedelta(hours=1)),
        Timesheet(company_id=company["id"], staff_id=staff_user.id, job_id=company["default_job_id"],
                  clock_in=now - timedelta(minutes=30)),
    ])
    await db_session.commit()

    resp = await async_client.get(
        f"{API}/companies/{company['id']}/employees/{staff_user.id}", headers=admin_headers
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["full_name"] == "Bob Builder"
    assert data["pay_rate"] == 20.0
    assert data["total_hours"] == 10.0
    assert data["hours_this_week"] <= 2.0
    assert data["total_shifts"] == 3
    assert data["is_clocked_in"] is True


@pytest.mark.asyncio
async def test_employee_detail_unknown_member(async_client: AsyncClient, company, admin_headers):
    """Unknown members give 404."""
    resp = await async_client.get(f"{API}/companies/{company['id']}/employees/9999", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_employee_pay_and_role(async_client: AsyncClient, company, admin_headers, staff_user):
    """Admins can change pay rate and role."""
    url = f"{API}/companies/{company['id']}/employees/{staff_user.id}"
    resp = await async_client.put(url, json={"pay_rate": 27.5, "role": "admin"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["pay_rate"] == 27.5
    assert resp.json()["role"] == "admin"

    resp = await async_client.put(url, json={"pay_rate": -1}, headers=admin_headers)
    assert resp.status_code == 422
    resp = await async_client.put(url, json={"pay_period": "weekly"}, headers=admin_headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_last_admin_cannot_be_demoted(async_client: AsyncClient, admin_user, company, admin_headers):
    """Demoting the only admin should fail with 400."""
    resp = await async_client.put(
        f"{API}/companies/{company['id']}/employees/{admin_user.id}",
        json={"role": "staff"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_remove_employee(async_client: AsyncClient, company, admin_headers, staff_user, staff_headers):
    """Removed members lose access to the company."""
    url = f"{API}/companies/{company['id']}/employees/{staff_user.id}"
    resp = await async_client.delete(url, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = await async_client.get(f"{API}/companies/{company['id']}", headers=staff_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_cannot_remove_yourself(async_client: AsyncClient, admin_user, company, admin_headers):
    """Admins cannot remove their own membership."""
    resp = await async_client.delete(
        f"{API}/companies/{company['id']}/employees/{admin_user.id}", headers=admin_headers
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_staff_options(async_client: AsyncClient, company, admin_headers, staff_user):
    """GET /staff lists members for report filters."""
    resp = await async_client.get(f"{API}/companies/{company['id']}/staff", headers=admin_headers)
    assert resp.status_code == 200
    names = {s["staff_name"]: s["role"] for s in resp.json()}
    assert names == {"Alice Admin": "admin", "Bob Builder": "staff"}
