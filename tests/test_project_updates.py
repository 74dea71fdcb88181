"""Project updates API test suite — submission, scoped listing, review."""

from __future__ import annotations

import uuid

from tests.conftest import auth_headers, make_profile, make_project_update, seed

UPDATE_BODY = {
    "title": "Site survey",
    "description": "Surveyed the north block; two cracked beams.",
    "work_location": "Client Site",
    "images": ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"],
}


async def test_submit(client, employee):
    resp = await client.post(
        "/api/v1/project-updates", json=UPDATE_BODY, headers=auth_headers(employee),
    )

    assert resp.status_code == 201
    data = resp.json()
    assert data["employee_id"] == str(employee.id)
    assert data["status"] == "submitted"
    assert data["images"] == UPDATE_BODY["images"]


async def test_submit_without_images(client, employee):
    body = {k: v for k, v in UPDATE_BODY.items() if k != "images"}
    resp = await client.post("/api/v1/project-updates", json=body, headers=auth_headers(employee))

    assert resp.status_code == 201
    assert resp.json()["images"] == []


async def test_submit_missing_fields(client, employee):
    resp = await client.post(
        "/api/v1/project-updates", json={"title": "x"}, headers=auth_headers(employee),
    )

    assert resp.status_code == 422
    assert set(resp.json()["errors"]) == {"description", "work_location"}


async def test_listing_scope(client, session_factory, employee, manager, admin):
    finance = make_profile(department="Finance")
    await seed(session_factory, finance)
    await seed(
        session_factory,
        make_project_update(employee.id, title="asha"),
        make_project_update(manager.id, title="ravi"),
        make_project_update(finance.id, title="finance"),
    )

    as_employee = await client.get("/api/v1/project-updates", headers=auth_headers(employee))
    as_manager = await client.get("/api/v1/project-updates", headers=auth_headers(manager))
    as_admin = await client.get("/api/v1/project-updates", headers=auth_headers(admin))

    assert [u["title"] for u in as_employee.json()] == ["asha"]
    assert {u["title"] for u in as_manager.json()} == {"asha", "ravi"}
    assert len(as_admin.json()) == 3


async def test_manager_approves(client, session_factory, employee, manager):
    update = make_project_update(employee.id)
    await seed(session_factory, update)

    resp = await client.put(
        f"/api/v1/project-updates/{update.id}/status",
        json={"status": "approved"},
        headers=auth_headers(manager),
    )

    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"


async def test_return_to_draft(client, session_factory, employee, admin):
    update = make_project_update(employee.id)
    await seed(session_factory, update)

    resp = await client.put(
        f"/api/v1/project-updates/{update.id}/status",
        json={"status": "draft"},
        headers=auth_headers(admin),
    )

    assert resp.json()["status"] == "draft"


async def test_approved_update_is_final(client, session_factory, employee, manager):
    update = make_project_update(employee.id, status="approved")
    await seed(session_factory, update)

    resp = await client.put(
        f"/api/v1/project-updates/{update.id}/status",
        json={"status": "draft"},
        headers=auth_headers(manager),
    )

    assert resp.status_code == 422


async def test_draft_cannot_be_approved(client, session_factory, employee, manager):
    update = make_project_update(employee.id, status="draft")
    await seed(session_factory, update)

    resp = await client.put(
        f"/api/v1/project-updates/{update.id}/status",
        json={"status": "approved"},
        headers=auth_headers(manager),
    )

    assert resp.status_code == 422


async def test_employee_cannot_review(client, session_factory, employee):
    update = make_project_update(employee.id)
    await seed(session_factory, update)

    resp = await client.put(
        f"/api/v1/project-updates/{update.id}/status",
        json={"status": "approved"},
        headers=auth_headers(employee),
    )

    assert resp.status_code == 403


async def test_review_missing_update(client, manager):
    resp = await client.put(
        f"/api/v1/project-updates/{uuid.uuid4()}/status",
        json={"status": "approved"},
        headers=auth_headers(manager),
    )
    assert resp.status_code == 404


async def test_manager_cannot_review_own_update(client, session_factory, manager):
    update = make_project_update(manager.id)
    await seed(session_factory, update)

    resp = await client.put(
        f"/api/v1/project-updates/{update.id}/status",
        json={"status": "approved"},
        headers=auth_headers(manager),
    )

    assert resp.status_code == 403


async def test_manager_cannot_review_other_department(client, session_factory, manager, admin):
    finance = make_profile(department="Finance")
    await seed(session_factory, finance)
    update = make_project_update(finance.id)
    await seed(session_factory, update)
    url = f"/api/v1/project-updates/{update.id}/status"

    as_manager = await client.put(url, json={"status": "approved"}, headers=auth_headers(manager))
    as_admin = await client.put(url, json={"status": "approved"}, headers=auth_headers(admin))

    assert as_manager.status_code == 403
    assert as_admin.json()["status"] == "approved"
