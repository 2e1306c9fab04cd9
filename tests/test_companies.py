"""Tests for company onboarding, settings and location settings."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from streamline.models.billing import CompanySubscription, SubscriptionPlan
from streamline.models.company import Company
from streamline.models.invitation import EmployeeInvitation
from streamline.models.job import Job
from streamline.models.user import User

API = "/api/v1"

BASE = {
    "company_name": "Maple Cleaning",
    "industry": "Cleaning Services",
    "company_size": "1-5",
    "address": "20 King St",
    "city": "Toronto",
    "state": "ON",
    "postal_code": "M5H 1A1",
    "country": "CA",
    "full_name": "Alice Admin",
    "admin_phone": "555-0199",
    "job_title": "manager",
}


@pytest.mark.asyncio
async def test_onboarding_creates_company_admin_and_trial(
    async_client: AsyncClient, db_session, admin_user, admin_headers
):
    """POST /companies should create the company, admin membership and a trial."""
    resp = await async_client.post(f"{API}/companies", json=BASE, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    company = data["company"]

    assert company["name"] == "Maple Cleaning"
    assert company["address"] == "20 King St, Toronto, ON M5H 1A1, CA"
    assert company["time_zone"] == "America/Toronto"
    assert company["currency"] == "CAD"
    assert company["default_pay_rate"] == 15.0
    assert company["default_job_id"] is not None
    assert data["subscription_status"] == "trialing"
    assert data["invitations_sent"] == 0

    ctx = await async_client.get(f"{API}/auth/me/companies", headers=admin_headers)
    assert ctx.json()["companies"][0]["role"] == "admin"

    profile = (await db_session.execute(select(User).where(User.id == admin_user.id))).scalar_one()
    await db_session.refresh(profile)
    assert profile.phone == "555-0199"
    assert profile.job_title == "manager"

    sub = (await db_session.execute(select(CompanySubscription, SubscriptionPlan.name).join(
        SubscriptionPlan, SubscriptionPlan.id == CompanySubscription.plan_id
    ))).one()
    assert sub[1] == "Starter"
    assert sub[0].trial_end is not None


@pytest.mark.asyncio
async def test_onboarding_default_job_is_system_default(async_client: AsyncClient, db_session, company):
    """The company's default job should be the system 'General Work' job."""
    job = await db_session.get(Job, company["default_job_id"])
    assert job.name == "General Work"
    assert job.is_system_default is True


@pytest.mark.asyncio
async def test_onboarding_invites_only_complete_rows(
    async_client: AsyncClient, db_session, admin_headers
):
    """Employee rows missing e-mail or name should be skipped."""
    body = dict(BASE, employees=[
        {"email": "Carol@Example.com", "full_name": "Carol", "role": "staff", "pay_rate": 22},
        {"email": "", "full_name": "No Email"},
        {"email": "noname@example.com", "full_name": "  "},
        {"email": "dave@example.com", "full_name": "Dave", "role": "admin"},
    ])
    resp = await async_client.post(f"{API}/companies", json=body, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    assert resp.json()["invitations_sent"] == 2

    rows = (await db_session.execute(
        select(EmployeeInvitation).order_by(EmployeeInvitation.email)
    )).scalars().all()
    assert [r.email for r in rows] == ["carol@example.com", "dave@example.com"]
    assert rows[0].pay_rate == 22
    assert rows[1].pay_rate == 15.0  # company default
    assert all(r.status == "pending" for r in rows)
    assert rows[0].token != rows[1].token


@pytest.mark.asyncio
async def test_onboarding_skips_duplicate_and_own_emails(
    async_client: AsyncClient, db_session, admin_user, admin_headers
):
    """Repeated addresses and the admin's own address get no invitation."""
    body = dict(BASE, employees=[
        {"email": "dup@example.com", "full_name": "Dup One"},
        {"email": "DUP@example.com", "full_name": "Dup Two"},
        {"email": admin_user.email.upper(), "full_name": "Alice Again"},
    ])
    resp = await async_client.post(f"{API}/companies", json=body, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    assert resp.json()["invitations_sent"] == 1

    rows = (await db_session.execute(select(EmployeeInvitation))).scalars().all()
    assert [(r.email, r.full_name) for r in rows] == [("dup@example.com", "Dup One")]


@pytest.mark.asyncio
async def test_onboarding_respects_trial_employee_limit(
    async_client: AsyncClient, db_session, admin_headers
):
    """The Starter trial seats five people, the admin included."""
    team = [{"email": f"worker{i}@example.com", "full_name": f"Worker {i}"} for i in range(5)]

    resp = await async_client.post(f"{API}/companies", json=dict(BASE, employees=team), headers=admin_headers)
    assert resp.status_code == 402
    assert "Starter" in resp.json()["detail"]
    assert (await db_session.execute(select(Company))).first() is None
    assert (await db_session.execute(select(EmployeeInvitation))).first() is None

    resp = await async_client.post(
        f"{API}/companies", json=dict(BASE, employees=team[:4]), headers=admin_headers
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["invitations_sent"] == 4


@pytest.mark.asyncio
async def test_onboarding_us_state_time_zone(async_client: AsyncClient, company):
    """Texas should map to America/Chicago and USD."""
    assert company["time_zone"] == "America/Chicago"
    assert company["currency"] == "USD"


@pytest.mark.asyncio
async def test_onboarding_explicit_settings_win(async_client: AsyncClient, admin_headers):
    """An explicit time zone and currency override the country defaults."""
    body = dict(BASE, time_zone="Europe/London", currency="gbp")
    resp = await async_client.post(f"{API}/companies", json=body, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["company"]["time_zone"] == "Europe/London"
    assert resp.json()["company"]["currency"] == "GBP"


@pytest.mark.asyncio
async def test_onboarding_validation(async_client: AsyncClient, admin_headers):
    """Unknown industry, bad size or bad time zone should fail with 422."""
    for override in (
        {"industry": "Space Mining"},
        {"company_size": "huge"},
        {"time_zone": "Mars/Olympus"},
        {"job_title": "emperor"},
        {"company_name": "   "},
    ):
        resp = await async_client.post(f"{API}/companies", json=dict(BASE, **override), headers=admin_headers)
        assert resp.status_code == 422, override


@pytest.mark.asyncio
async def test_onboarding_requires_auth(async_client: AsyncClient):
    """Anonymous onboarding should be rejected."""
    resp = await async_client.post(f"{API}/companies", json=BASE)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_read_company_members_only(
    async_client: AsyncClient, company, staff_headers, make_user, headers_for
):
    """Members may read the company; outsiders get 403 and unknown ids 404."""
    resp = await async_client.get(f"{API}/companies/{company['id']}", headers=staff_headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Acme Builders"

    outsider = await make_user("eve@evil.test")
    resp = await async_client.get(f"{API}/companies/{company['id']}", headers=headers_for(outsider))
    assert resp.status_code == 403

    resp = await async_client.get(f"{API}/companies/9999", headers=staff_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_company_admin_only(async_client: AsyncClient, company, admin_headers, staff_headers):
    """PUT /companies/{id} is admin-only and applies partial updates."""
    url = f"{API}/companies/{company['id']}"
    resp = await async_client.put(url, json={"name": "Hacked"}, headers=staff_headers)
    assert resp.status_code == 403

    resp = await async_client.put(url, json={"name": "Acme Ltd", "default_pay_rate": 21}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Acme Ltd"
    assert resp.json()["default_pay_rate"] == 21
    assert resp.json()["industry"] == "Construction"


@pytest.mark.asyncio
async def test_disabling_job_tracking_keeps_default_job(
    async_client: AsyncClient, db_session, company, admin_headers
):
    """Turning job tracking off should leave default_job_id pointing at a system job."""
    url = f"{API}/companies/{company['id']}"
    resp = await async_client.put(url, json={"job_tracking_enabled": False}, headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["job_tracking_enabled"] is False
    job = await db_session.get(Job, data["default_job_id"])
    assert job.is_system_default is True


@pytest.mark.asyncio
async def test_location_settings_roundtrip(async_client: AsyncClient, company, admin_headers, staff_headers):
    """Location settings have defaults, and admins can change them within bounds."""
    url = f"{API}/companies/{company['id']}/location-settings"
    resp = await async_client.get(url, headers=staff_headers)
    assert resp.json() == {
        "location_tracking_enabled": True,
        "location_ping_interval_seconds": 30,
        "location_ping_distance_meters": 50,
        "geofencing_enabled": True,
    }

    resp = await async_client.put(url, json={"location_ping_interval_seconds": 5}, headers=admin_headers)
    assert resp.status_code == 422

    resp = await async_client.put(url, json={"location_ping_interval_seconds": 60}, headers=staff_headers)
    assert resp.status_code == 403

    resp = await async_client.put(
        url, json={"location_ping_interval_seconds": 60, "geofencing_enabled": False}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["location_ping_interval_seconds"] == 60
    assert resp.json()["geofencing_enabled"] is False
