"""Tests for jobs, assignments and the jobs a worker may clock into."""

import pytest
from httpx import AsyncClient

API = "/api/v1"


async def _create_job(client: AsyncClient, company_id: int, headers: dict, name: str) -> dict:
    resp = await client.post(f"{API}/companies/{company_id}/jobs", json={"name": name}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_create_and_list_jobs(async_client: AsyncClient, company, admin_headers, staff_headers):
    """The default job is listed first, then the newest jobs."""
    await _create_job(async_client, company["id"], admin_headers, "Warehouse")
    await _create_job(async_client, company["id"], admin_headers, "Office Fit-out")

    resp = await async_client.get(f"{API}/companies/{company['id']}/jobs", headers=staff_headers)
    assert resp.status_code == 200
    names = [j["name"] for j in resp.json()]
    assert names == ["General Work", "Office Fit-out", "Warehouse"]


@pytest.mark.asyncio
async def test_create_job_admin_only(async_client: AsyncClient, company, staff_headers):
    """Staff cannot create jobs."""
    resp = await async_client.post(
        f"{API}/companies/{company['id']}/jobs", json={"name": "Nope"}, headers=staff_headers
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_job_name_validation(async_client: AsyncClient, company, admin_headers):
    """Blank job names are rejected."""
    resp = await async_client.post(
        f"{API}/companies/{company['id']}/jobs", json={"name": "   "}, headers=admin_headers
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_and_archive_job(async_client: AsyncClient, company, admin_headers):
    """Archived jobs disappear from the default listing."""
    job = await _create_job(async_client, company["id"], admin_headers, "Bridge")
    url = f"{API}/companies/{company['id']}/jobs/{job['id']}"

    resp = await async_client.put(url, json={"name": "Bridge Repair", "address": "River Rd"}, headers=admin_headers)
    assert resp.json()["name"] == "Bridge Repair"
    assert resp.json()["address"] == "River Rd"

    resp = await async_client.delete(url, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["is_archived"] is True

    listing = f"{API}/companies/{company['id']}/jobs"
    active = (await async_client.get(listing, headers=admin_headers)).json()
    assert job["id"] not in [j["id"] for j in active]
    everything = (await async_client.get(listing, params={"include_archived": True}, headers=admin_headers)).json()
    assert job["id"] in [j["id"] for j in everything]


@pytest.mark.asyncio
async def test_default_job_cannot_be_archived(async_client: AsyncClient, company, admin_headers):
    """Archiving the system default job should fail with 400."""
    resp = await async_client.delete(
        f"{API}/companies/{company['id']}/jobs/{company['default_job_id']}", headers=admin_headers
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_job_limit_enforced(async_client: AsyncClient, company, admin_headers):
    """The Starter trial allows 3 jobs; the fourth returns 402."""
    for i in range(3):
        await _create_job(async_client, company["id"], admin_headers, f"Site {i}")
    resp = await async_client.post(
        f"{API}/companies/{company['id']}/jobs", json={"name": "Site 4"}, headers=admin_headers
    )
    assert resp.status_code == 402


@pytest.mark.asyncio
async def test_toggle_assignment(async_client: AsyncClient, company, admin_headers, staff_user):
    """Toggling creates an active assignment, then flips it off and on."""
    job = await _create_job(async_client, company["id"], admin_headers, "Roofing")
    url = f"{API}/companies/{company['id']}/job-assignments/toggle"
    body = {"job_id": job["id"], "user_id": staff_user.id}

    first = await async_client.post(url, json=body, headers=admin_headers)
    assert first.status_code == 200
    assert first.json()["is_active"] is True
    second = await async_client.post(url, json=body, headers=admin_headers)
    assert second.json()["is_active"] is False
    assert second.json()["id"] == first.json()["id"]

    listing = await async_client.get(f"{API}/companies/{company['id']}/job-assignments", headers=admin_headers)
    assert len(listing.json()) == 1


@pytest.mark.asyncio
async def test_toggle_assignment_unknown_member(async_client: AsyncClient, company, admin_headers):
    """Assigning a non-member returns 404."""
    job = await _create_job(async_client, company["id"], admin_headers, "Roofing")
    resp = await async_client.post(
        f"{API}/companies/{company['id']}/job-assignments/toggle",
        json={"job_id": job["id"], "user_id": 9999},
        headers=admin_headers,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_available_jobs_for_staff(
    async_client: AsyncClient, company, admin_headers, staff_user, staff_headers
):
    """Staff without assignments see all jobs; with assignments only the active ones."""
    roofing = await _create_job(async_client, company["id"], admin_headers, "Roofing")
    await _create_job(async_client, company["id"], admin_headers, "Plumbing")
    url = f"{API}/companies/{company['id']}/jobs/available"

    names = [j["name"] for j in (await async_client.get(url, headers=staff_headers)).json()]
    assert names == ["Plumbing", "Roofing"]

    await async_client.post(
        f"{API}/companies/{company['id']}/job-assignments/toggle",
        json={"job_id": roofing["id"], "user_id": staff_user.id},
        headers=admin_headers,
    )
    names = [j["name"] for j in (await async_client.get(url, headers=staff_headers)).json()]
    assert names == ["Roofing"]

    admin_names = [j["name"] for j in (await async_client.get(url, headers=admin_headers)).json()]
    assert admin_names == ["Plumbing", "Roofing"]


@pytest.mark.asyncio
async def test_available_jobs_with_tracking_disabled(async_client: AsyncClient, company, admin_headers, staff_headers):
    """With job tracking off only the default job is offered."""
    await _create_job(async_client, company["id"], admin_headers, "Roofing")
    await async_client.put(
        f"{API}/companies/{company['id']}", json={"job_tracking_enabled": False}, headers=admin_headers
    )
    resp = await async_client.get(f"{API}/companies/{company['id']}/jobs/available", headers=staff_headers)
    assert [j["id"] for j in resp.json()] == [company["default_job_id"]]


@pytest.mark.asyncio
async def test_job_selection_required_flag(async_client: AsyncClient, company, admin_headers, staff_headers):
    """Selection is required only while tracking is on and the flag is set."""
    url = f"{API}/companies/{company['id']}/job-selection-required"
    assert (await async_client.get(url, headers=staff_headers)).json() == {"required": True}

    await async_client.put(
        f"{API}/companies/{company['id']}", json={"job_tracking_enabled": False}, headers=admin_headers
    )
    assert (await async_client.get(url, headers=staff_headers)).json() == {"required": False}
