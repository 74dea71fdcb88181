"""Announcements API test suite — department feed and publishing."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from portal.announcements.schemas import AnnouncementCreate
from tests.conftest import auth_headers, make_announcement, seed


@pytest.mark.parametrize("department", [None, "", "  ", "company-wide"])
def test_company_wide_department_normalised(department):
    assert AnnouncementCreate(title="t", content="c", department=department).department is None


async def test_feed_is_department_scoped(client, session_factory, employee, admin):
    base = datetime(2026, 3, 1, 9, tzinfo=timezone.utc)
    await seed(
        session_factory,
        make_announcement(admin.id, title="all hands", created_at=base),
        make_announcement(
            admin.id, title="eng offsite", department="Engineering",
            created_at=base + timedelta(hours=1),
        ),
        make_announcement(
            admin.id, title="finance close", department="Finance",
            created_at=base + timedelta(hours=2),
        ),
    )

    as_employee = await client.get("/api/v1/announcements", headers=auth_headers(employee))
    as_admin = await client.get("/api/v1/announcements", headers=auth_headers(admin))

    assert [a["title"] for a in as_employee.json()] == ["eng offsite", "all hands"]
    assert as_employee.json()[0]["author"]["full_name"] == "Sam Admin"
    assert [a["title"] for a in as_admin.json()] == ["finance close", "eng offsite", "all hands"]


async def test_publish(client, admin):
    resp = await client.post(
        "/api/v1/announcements",
        json={
            "title": "Holiday calendar",
            "content": "The 2027 calendar is out.",
            "department": "company-wide",
            "is_priority": True,
        },
        headers=auth_headers(admin),
    )

    assert resp.status_code == 201
    data = resp.json()
    assert data["author_id"] == str(admin.id)
    assert data["department"] is None
    assert data["is_priority"] is True


async def test_publish_requires_title_and_content(client, admin):
    resp = await client.post(
        "/api/v1/announcements", json={"title": "Only a title"}, headers=auth_headers(admin),
    )

    assert resp.status_code == 422
    assert list(resp.json()["errors"]) == ["content"]


async def test_only_super_admin_publishes(client, employee, manager):
    for profile in (employee, manager):
        resp = await client.post(
            "/api/v1/announcements",
            json={"title": "Hi", "content": "There"},
            headers=auth_headers(profile),
        )
        assert resp.status_code == 403


async def test_publish_refreshes_dashboard_count(client, employee, admin):
    headers = auth_headers(employee)
    before = await client.get("/api/v1/dashboard/stats", headers=headers)

    await client.post(
        "/api/v1/announcements",
        json={"title": "Hi", "content": "There"},
        headers=auth_headers(admin),
    )
    after = await client.get("/api/v1/dashboard/stats", headers=headers)

    assert after.json()["recent_announcements"] == before.json()["recent_announcements"] + 1
