"""SqlDataClient test suite — query translation, single-row semantics, writes, errors."""

from __future__ import annotations

import uuid
from datetime import date

import pytest

from portal.client.deadline import Deadline
from portal.client.errors import NO_ROWS, RemoteError, RemoteTimeout
from portal.client.query import ANNOUNCEMENTS, LEAVE_REQUESTS, PROFILES, PROJECT_UPDATES, TASKS, Query
from portal.client.rows import Profile, ProjectUpdate, Task
from portal.common.constants import TaskStatus, UserRole
from tests.conftest import FakeClock, make_announcement, make_leave, make_profile, make_task, seed


@pytest.fixture
async def people(session_factory):
    alice = make_profile(full_name="Alice Rao", department="Sales", location="Pune")
    bob = make_profile(full_name="Bob Iyer", department="Finance", role=UserRole.manager)
    carol = make_profile(full_name="Carol Das", department="Sales", is_active=False)
    await seed(session_factory, alice, bob, carol)
    return alice, bob, carol


# ═════════════════════════════════════════════════════════════════════
# 1. Reads
# ═════════════════════════════════════════════════════════════════════


async def test_select_returns_typed_rows(data_client, people):
    result = await data_client.select(Query(table=PROFILES, order_by="full_name"))

    assert [p.full_name for p in result.rows] == ["Alice Rao", "Bob Iyer", "Carol Das"]
    assert all(isinstance(p, Profile) for p in result.rows)
    assert result.rows[1].role == UserRole.manager
    assert result.first.full_name == "Alice Rao"


async def test_filter_operators(data_client, people):
    alice, bob, carol = people

    by_in = await data_client.select(Query(
        table=PROFILES, filters={"id__in": [alice.id, carol.id]}, order_by="full_name",
    ))
    by_ilike = await data_client.select(Query(table=PROFILES, filters={"full_name__ilike": "IYER"}))
    by_eq = await data_client.select(Query(
        table=PROFILES, filters={"department": "Sales", "is_active": True},
    ))
    none_dropped = await data_client.select(Query(table=PROFILES, filters={"department": None}))

    assert [p.id for p in by_in.rows] == [alice.id, carol.id]
    assert [p.id for p in by_ilike.rows] == [bob.id]
    assert [p.id for p in by_eq.rows] == [alice.id]
    assert len(none_dropped.rows) == 3


async def test_enum_filter_values_are_unwrapped(data_client, people, session_factory):
    alice, bob, _ = people
    await seed(
        session_factory,
        make_task(alice.id, bob.id, status="in_progress"),
        make_task(alice.id, bob.id, status="completed"),
    )

    result = await data_client.select(Query(
        table=TASKS, filters={"status__in": [TaskStatus.pending, TaskStatus.in_progress]},
    ))

    assert [t.status for t in result.rows] == [TaskStatus.in_progress]


async def test_date_range_filters(data_client, people, session_factory):
    alice, bob, _ = people
    await seed(
        session_factory,
        make_task(alice.id, bob.id, title="early", due_date=date(2026, 3, 1)),
        make_task(alice.id, bob.id, title="mid", due_date=date(2026, 3, 10)),
        make_task(alice.id, bob.id, title="late", due_date=date(2026, 3, 20)),
    )

    result = await data_client.select(Query(
        table=TASKS,
        filters={"due_date__from": date(2026, 3, 5), "due_date__to": date(2026, 3, 15)},
    ))

    assert [t.title for t in result.rows] == ["mid"]


async def test_any_of_ors_condition_groups(data_client, people, session_factory):
    alice, bob, _ = people
    await seed(
        session_factory,
        make_announcement(bob.id, title="all"),
        make_announcement(bob.id, title="sales", department="Sales"),
        make_announcement(bob.id, title="finance", department="Finance"),
    )

    result = await data_client.select(Query(
        table=ANNOUNCEMENTS,
        any_of=[{"department__isnull": True}, {"department": "Sales"}],
        order_by="title",
    ))

    assert [a.title for a in result.rows] == ["all", "sales"]


async def test_embed_and_column_projection(data_client, people, session_factory):
    alice, bob, _ = people
    await seed(session_factory, make_leave(alice.id, status="approved"))

    result = await data_client.select(Query(
        table=LEAVE_REQUESTS, columns=["id"], embed=["employee"],
    ))

    (row,) = result.rows
    assert row.employee.department == "Sales"
    assert not hasattr(row, "reason")


async def test_limit(data_client, people):
    result = await data_client.select(Query(table=PROFILES, order_by="-full_name", limit=2))
    assert [p.full_name for p in result.rows] == ["Carol Das", "Bob Iyer"]


async def test_count(data_client, people):
    assert await data_client.count(Query(table=PROFILES)) == 3
    assert await data_client.count(Query(table=PROFILES, filters={"is_active": True})) == 2


async def test_fetch_one(data_client, people):
    alice, _, _ = people
    profile = await data_client.fetch_one(Query(table=PROFILES, filters={"id": alice.id}))
    assert profile.email == alice.email


async def test_fetch_one_no_rows(data_client, people):
    with pytest.raises(RemoteError) as exc_info:
        await data_client.fetch_one(Query(table=PROFILES, filters={"id": uuid.uuid4()}))
    assert exc_info.value.code == NO_ROWS
    assert exc_info.value.is_not_found


async def test_fetch_one_multiple_rows(data_client, people):
    with pytest.raises(RemoteError) as exc_info:
        await data_client.fetch_one(Query(table=PROFILES, filters={"department": "Sales"}))
    assert exc_info.value.is_not_found


async def test_unknown_column_is_remote_error(data_client, people):
    with pytest.raises(RemoteError) as exc_info:
        await data_client.select(Query(table=PROFILES, filters={"salary": 1}))
    assert exc_info.value.code == "42703"


# ═════════════════════════════════════════════════════════════════════
# 2. Writes
# ═════════════════════════════════════════════════════════════════════


async def test_insert_returns_row_with_defaults(data_client, people):
    alice, bob, _ = people

    task = await data_client.insert(TASKS, {
        "title": "Ship it",
        "description": "Release 1.2",
        "assigned_to": alice.id,
        "assigned_by": bob.id,
        "department": "Finance",
        "status": TaskStatus.pending,
    })

    assert isinstance(task, Task)
    assert isinstance(task.id, uuid.UUID)
    assert task.status == TaskStatus.pending
    assert task.priority.value == "medium"
    assert task.created_at is not None


async def test_insert_null_images_reads_back_empty(data_client, people):
    alice, _, _ = people

    update = await data_client.insert(PROJECT_UPDATES, {
        "employee_id": alice.id,
        "title": "Survey",
        "description": "North block",
        "work_location": "Client Site",
        "images": None,
        "status": "submitted",
    })
    fetched = await data_client.fetch_one(Query(table=PROJECT_UPDATES, filters={"id": update.id}))

    assert isinstance(fetched, ProjectUpdate)
    assert fetched.images == []


async def test_update_returns_updated_row(data_client, people):
    alice, _, _ = people

    updated = await data_client.update(PROFILES, {"location": "Goa"}, match={"id": alice.id})

    assert updated.location == "Goa"
    again = await data_client.fetch_one(Query(table=PROFILES, filters={"id": alice.id}))
    assert again.location == "Goa"


async def test_update_without_match_rejected(data_client):
    with pytest.raises(ValueError):
        await data_client.update(PROFILES, {"location": "Goa"}, match={})


async def test_update_missing_row(data_client, people):
    with pytest.raises(RemoteError) as exc_info:
        await data_client.update(PROFILES, {"location": "Goa"}, match={"id": uuid.uuid4()})
    assert exc_info.value.is_not_found


async def test_update_unknown_column(data_client, people):
    alice, _, _ = people
    with pytest.raises(RemoteError) as exc_info:
        await data_client.update(PROFILES, {"salary": 10}, match={"id": alice.id})
    assert exc_info.value.code == "42703"


async def test_insert_unknown_table_rejected(data_client):
    with pytest.raises(ValueError):
        await data_client.insert("payroll", {"x": 1})


# ═════════════════════════════════════════════════════════════════════
# 3. Deadlines
# ═════════════════════════════════════════════════════════════════════


async def test_expired_deadline_raises_timeout(data_client, people):
    clock = FakeClock()
    deadline = Deadline(5, clock=clock)
    clock.advance(6)

    with pytest.raises(RemoteTimeout):
        await data_client.select(Query(table=PROFILES), deadline=deadline)


async def test_live_deadline_allows_call(data_client, people):
    result = await data_client.count(Query(table=PROFILES), deadline=Deadline(30))
    assert result == 3
