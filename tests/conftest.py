"""Shared test fixtures — SQL data client, cache, app, auth helpers, factories.

Reusable across all test modules. Uses a file-backed SQLite database via
aiosqlite so that concurrently gathered queries each get their own
connection, as they would against PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from portal.client.models import (
    AnnouncementRecord,
    LeaveRequestRecord,
    ProfileRecord,
    ProjectUpdateRecord,
    TaskRecord,
)
from portal.client.sql import SqlDataClient
from portal.common.cache import DataCache
from portal.common.constants import UserRole
from portal.common.rate_limit import limiter
from portal.config import settings
from portal.dashboard.service import DashboardService
from portal.database import Base, create_engine, create_session_factory
from portal.main import create_app


# ── Fake clock for TTL tests ────────────────────────────────────────

class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ── Test database (SQLite file per test) ────────────────────────────

@pytest.fixture
async def engine(tmp_path):
    """Fresh database with all tables created."""
    eng = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def data_client(session_factory) -> SqlDataClient:
    return SqlDataClient(session_factory)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> DataCache:
    return DataCache(clock=clock)


@pytest.fixture
def dashboard(data_client, cache) -> DashboardService:
    return DashboardService(data_client, cache)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    limiter.reset()
    yield


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app(data_client, cache):
    """Fresh app instance wired to the test data client and cache."""
    yield create_app(data_client=data_client, cache=cache)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Model factories ─────────────────────────────────────────────────

def _now() -> datetime:
    return datetime.now(timezone.utc)


def make_profile(
    *,
    email: Optional[str] = None,
    full_name: str = "Test User",
    role: UserRole = UserRole.employee,
    department: str = "Engineering",
    location: str = "Mumbai",
    is_active: bool = True,
    **extra: Any,
) -> ProfileRecord:
    profile_id = extra.pop("id", uuid.uuid4())
    return ProfileRecord(
        id=profile_id,
        email=email or f"user-{profile_id.hex[:8]}@example.com",
        full_name=full_name,
        role=role.value,
        department=department,
        job_title=extra.pop("job_title", "Engineer"),
        joining_date=extra.pop("joining_date", date(2024, 1, 15)),
        location=location,
        is_active=is_active,
        **extra,
    )


def make_task(
    assigned_to: uuid.UUID,
    assigned_by: uuid.UUID,
    *,
    title: str = "Prepare report",
    status: str = "pending",
    department: str = "Engineering",
    due_date: Optional[date] = None,
    created_at: Optional[datetime] = None,
    **extra: Any,
) -> TaskRecord:
    return TaskRecord(
        id=extra.pop("id", uuid.uuid4()),
        title=title,
        description=extra.pop("description", "Quarterly numbers"),
        assigned_to=assigned_to,
        assigned_by=assigned_by,
        due_date=due_date,
        priority=extra.pop("priority", "medium"),
        status=status,
        department=department,
        created_at=created_at or _now(),
        **extra,
    )


def make_leave(
    employee_id: uuid.UUID,
    *,
    status: str = "pending",
    leave_type: str = "vacation",
    start_date: date = date(2026, 3, 2),
    end_date: date = date(2026, 3, 4),
    created_at: Optional[datetime] = None,
    **extra: Any,
) -> LeaveRequestRecord:
    return LeaveRequestRecord(
        id=extra.pop("id", uuid.uuid4()),
        employee_id=employee_id,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        days_count=(end_date - start_date).days + 1,
        reason=extra.pop("reason", "Family trip"),
        status=status,
        created_at=created_at or _now(),
        **extra,
    )


def make_announcement(
    author_id: uuid.UUID,
    *,
    title: str = "Office closed Friday",
    content: str = "The office will be closed for maintenance.",
    department: Optional[str] = None,
    created_at: Optional[datetime] = None,
    **extra: Any,
) -> AnnouncementRecord:
    return AnnouncementRecord(
        id=extra.pop("id", uuid.uuid4()),
        title=title,
        content=content,
        author_id=author_id,
        department=department,
        is_priority=extra.pop("is_priority", False),
        created_at=created_at or _now(),
        **extra,
    )


def make_project_update(
    employee_id: uuid.UUID,
    *,
    title: str = "Site survey",
    status: str = "submitted",
    **extra: Any,
) -> ProjectUpdateRecord:
    return ProjectUpdateRecord(
        id=extra.pop("id", uuid.uuid4()),
        employee_id=employee_id,
        title=title,
        description=extra.pop("description", "Surveyed the north block."),
        work_location=extra.pop("work_location", "Client Site"),
        images=extra.pop("images", []),
        status=status,
        **extra,
    )


async def seed(session_factory, *records: Any) -> None:
    """Insert *records* and commit, so every later session sees them."""
    async with session_factory() as session:
        async with session.begin():
            session.add_all(records)


# ── Common seeded users ─────────────────────────────────────────────

@pytest.fixture
async def employee(session_factory) -> ProfileRecord:
    record = make_profile(full_name="Asha Employee", email="asha@example.com")
    await seed(session_factory, record)
    return record


@pytest.fixture
async def manager(session_factory) -> ProfileRecord:
    record = make_profile(
        full_name="Ravi Manager", email="ravi@example.com", role=UserRole.manager,
    )
    await seed(session_factory, record)
    return record


@pytest.fixture
async def admin(session_factory) -> ProfileRecord:
    record = make_profile(
        full_name="Sam Admin",
        email="sam@example.com",
        role=UserRole.super_admin,
        department="Operations",
    )
    await seed(session_factory, record)
    return record


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    identity_id: uuid.UUID,
    email: str = "test.user@example.com",
    *,
    expired: bool = False,
    audience: str = "authenticated",
) -> str:
    """Generate a hosted-auth style JWT for testing."""
    if expired:
        exp = _now() - timedelta(hours=1)
    else:
        exp = _now() + timedelta(hours=1)
    payload = {
        "sub": str(identity_id),
        "email": email,
        "aud": audience,
        "role": "authenticated",
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(profile: Any) -> dict[str, str]:
    """Bearer headers for a seeded profile record."""
    return {"Authorization": f"Bearer {create_access_token(profile.id, profile.email)}"}
