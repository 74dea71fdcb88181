"""Admin API test suite — profile listing, creation, edits, activation, stats."""

from __future__ import annotations

import uuid

import pytest

from portal.common.constants import UserRole
from tests.conftest import auth_headers, make_profile, make_task, seed


@pytest.fixture
async def staff(session_factory, employee, manager, admin):
    """The three seeded users plus one inactive finance profile."""
    leaver = make_profile(
        full_name="Lena Leaver", email="lena@example.com", department="Finance", is_active=False,
    )
    await seed(session_factory, leaver)
    return employee, manager, admin, leaver


# ═════════════════════════════════════════════════════════════════════
# 1. GET /admin/profiles
# ═════════════════════════════════════════════════════════════════════


class TestListProfiles:

    async def test_includes_inactive(self, client, staff):
        _, manager, _, leaver = staff
        resp = await client.get("/api/v1/admin/profiles", headers=auth_headers(manager))

        assert resp.status_code == 200
        ids = {p["id"] for p in resp.json()}
        assert str(leaver.id) in ids
        assert len(ids) == 4

    async def test_search_matches_email(self, client, staff):
        _, manager, _, _ = staff
        resp = await client.get(
            "/api/v1/admin/profiles", params={"search": "LENA@"}, headers=auth_headers(manager),
        )
        assert [p["full_name"] for p in resp.json()] == ["Lena Leaver"]

    async def test_filter_by_department_and_role(self, client, staff):
        _, _, admin, _ = staff
        headers = auth_headers(admin)

        finance = await client.get(
            "/api/v1/admin/profiles", params={"department": "Finance"}, headers=headers,
        )
        managers = await client.get(
            "/api/v1/admin/profiles", params={"role": "manager"}, headers=headers,
        )

        assert [p["full_name"] for p in finance.json()] == ["Lena Leaver"]
        assert [p["full_name"] for p in managers.json()] == ["Ravi Manager"]

    async def test_employee_forbidden(self, client, staff):
        employee, *_ = staff
        resp = await client.get("/api/v1/admin/profiles", headers=auth_headers(employee))
        assert resp.status_code == 403


# ═════════════════════════════════════════════════════════════════════
# 2. GET /admin/stats
# ═════════════════════════════════════════════════════════════════════


async def test_stats(client, staff):
    _, manager, _, _ = staff
    resp = await client.get("/api/v1/admin/stats", headers=auth_headers(manager))

    assert resp.json() == {
        "total": 4,
        "active": 3,
        "inactive": 1,
        "admins": 1,
        "managers": 1,
        "employees": 2,
    }


# ═════════════════════════════════════════════════════════════════════
# 3. POST /admin/profiles
# ═════════════════════════════════════════════════════════════════════


class TestCreateProfile:

    async def test_create_with_defaults(self, client, admin):
        resp = await client.post(
            "/api/v1/admin/profiles",
            json={"email": "neha@example.com", "full_name": "Neha K", "department": "Sales"},
            headers=auth_headers(admin),
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["role"] == UserRole.employee.value
        assert data["job_title"] == "Employee"
        assert data["location"] == "Office"
        assert data["is_active"] is True

    async def test_missing_fields(self, client, admin):
        resp = await client.post(
            "/api/v1/admin/profiles",
            json={"email": "neha@example.com", "full_name": " "},
            headers=auth_headers(admin),
        )

        assert resp.status_code == 422
        assert set(resp.json()["errors"]) == {"full_name", "department"}

    async def test_new_profile_appears_in_directory(self, client, admin, employee):
        headers = auth_headers(employee)
        before = await client.get("/api/v1/profiles", headers=headers)

        await client.post(
            "/api/v1/admin/profiles",
            json={"email": "neha@example.com", "full_name": "Neha K", "department": "Sales"},
            headers=auth_headers(admin),
        )
        after = await client.get("/api/v1/profiles", headers=headers)

        assert len(after.json()) == len(before.json()) + 1


# ═════════════════════════════════════════════════════════════════════
# 4. PUT /admin/profiles/{id} and toggle-active
# ═════════════════════════════════════════════════════════════════════


async def test_update_profile(client, staff):
    employee, manager, _, _ = staff
    resp = await client.put(
        f"/api/v1/admin/profiles/{employee.id}",
        json={"role": "manager", "department": "Platform"},
        headers=auth_headers(manager),
    )

    assert resp.status_code == 200
    assert resp.json()["role"] == "manager"
    assert resp.json()["department"] == "Platform"


async def test_update_missing_profile(client, manager):
    resp = await client.put(
        f"/api/v1/admin/profiles/{uuid.uuid4()}",
        json={"job_title": "Lead"},
        headers=auth_headers(manager),
    )
    assert resp.status_code == 404


async def test_empty_update_returns_current(client, staff):
    employee, manager, _, _ = staff
    resp = await client.put(
        f"/api/v1/admin/profiles/{employee.id}", json={}, headers=auth_headers(manager),
    )
    assert resp.status_code == 200
    assert resp.json()["full_name"] == "Asha Employee"


async def test_update_rejects_null_for_required_column(client, staff):
    employee, _, admin, _ = staff
    resp = await client.put(
        f"/api/v1/admin/profiles/{employee.id}",
        json={"role": None, "joining_date": None},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 422
    assert set(resp.json()["errors"]) == {"role", "joining_date"}


async def test_promotion_refreshes_promoted_users_lists(client, session_factory, staff):
    employee, _, admin, _ = staff
    peer = make_profile(full_name="Priya Peer")
    await seed(session_factory, peer)
    await seed(session_factory, make_task(peer.id, admin.id, department="Engineering"))
    headers = auth_headers(employee)
    assert (await client.get("/api/v1/tasks", headers=headers)).json() == []

    await client.put(
        f"/api/v1/admin/profiles/{employee.id}",
        json={"role": "manager"},
        headers=auth_headers(admin),
    )
    resp = await client.get("/api/v1/tasks", headers=headers)

    assert [t["assigned_to"] for t in resp.json()] == [str(peer.id)]


async def test_toggle_active_round_trip(client, staff):
    employee, _, admin, _ = staff
    headers = auth_headers(admin)
    url = f"/api/v1/admin/profiles/{employee.id}/toggle-active"

    off = await client.post(url, headers=headers)
    locked_out = await client.get("/api/v1/auth/me", headers=auth_headers(employee))
    on = await client.post(url, headers=headers)

    assert off.json()["is_active"] is False
    assert locked_out.status_code == 401
    assert on.json()["is_active"] is True


async def test_deactivation_refreshes_headcount(client, staff):
    employee, _, admin, _ = staff
    headers = auth_headers(admin)
    before = await client.get("/api/v1/dashboard/stats", headers=headers)

    await client.post(f"/api/v1/admin/profiles/{employee.id}/toggle-active", headers=headers)
    after = await client.get("/api/v1/dashboard/stats", headers=headers)

    assert after.json()["total_employees"] == before.json()["total_employees"] - 1


async def test_toggle_missing_profile(client, admin):
    resp = await client.post(
        f"/api/v1/admin/profiles/{uuid.uuid4()}/toggle-active", headers=auth_headers(admin),
    )
    assert resp.status_code == 404
