"""ORM mapping of the hosted backend's tables for ``SqlDataClient``.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations. Column
names match the backend schema one-to-one; enum-valued columns are plain
text guarded by check constraints on the server.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.client.query import (
    ANNOUNCEMENTS,
    LEAVE_REQUESTS,
    PROFILES,
    PROJECT_UPDATES,
    TASKS,
)
from portal.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Timestamps:
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )


# ═════════════════════════════════════════════════════════════════════
# profiles
# ═════════════════════════════════════════════════════════════════════


class ProfileRecord(_Timestamps, Base):
    __tablename__ = PROFILES

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    role: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="employee")
    department: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    job_title: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    joining_date: Mapped[date] = mapped_column(sa.Date, nullable=False, default=date.today)
    phone: Mapped[Optional[str]] = mapped_column(sa.String(30))
    location: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    reporting_to: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid, sa.ForeignKey("profiles.id"),
    )
    profile_picture: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    __table_args__ = (
        sa.CheckConstraint(
            "role IN ('employee', 'manager', 'super_admin')", name="ck_profiles_role",
        ),
        sa.Index("ix_profiles_department", "department"),
    )

    def __repr__(self) -> str:
        return f"<Profile {self.email!r} ({self.role})>"


# ═════════════════════════════════════════════════════════════════════
# leave_requests
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestRecord(_Timestamps, Base):
    __tablename__ = LEAVE_REQUESTS

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("profiles.id"), nullable=False,
    )
    leave_type: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    days_count: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="pending")
    manager_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid, sa.ForeignKey("profiles.id"),
    )
    manager_comments: Mapped[Optional[str]] = mapped_column(sa.Text)

    # ── Relationships ───────────────────────────────────────────────
    employee: Mapped[ProfileRecord] = relationship(foreign_keys=[employee_id])
    manager: Mapped[Optional[ProfileRecord]] = relationship(foreign_keys=[manager_id])

    __table_args__ = (
        sa.Index("ix_leave_requests_employee_status", "employee_id", "status"),
    )


# ═════════════════════════════════════════════════════════════════════
# tasks
# ═════════════════════════════════════════════════════════════════════


class TaskRecord(_Timestamps, Base):
    __tablename__ = TASKS

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    assigned_to: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("profiles.id"), nullable=False,
    )
    assigned_by: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("profiles.id"), nullable=False,
    )
    due_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    priority: Mapped[str] = mapped_column(sa.String(10), nullable=False, default="medium")
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="pending")
    department: Mapped[str] = mapped_column(sa.String(100), nullable=False)

    # ── Relationships ───────────────────────────────────────────────
    assignee: Mapped[ProfileRecord] = relationship(foreign_keys=[assigned_to])
    assigner: Mapped[ProfileRecord] = relationship(foreign_keys=[assigned_by])

    __table_args__ = (
        sa.Index("ix_tasks_assigned_to_status", "assigned_to", "status"),
    )


# ═════════════════════════════════════════════════════════════════════
# announcements
# ═════════════════════════════════════════════════════════════════════


class AnnouncementRecord(_Timestamps, Base):
    __tablename__ = ANNOUNCEMENTS

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False)
    author_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("profiles.id"), nullable=False,
    )
    department: Mapped[Optional[str]] = mapped_column(sa.String(100))
    attachment_url: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_priority: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)

    author: Mapped[ProfileRecord] = relationship(foreign_keys=[author_id])


# ═════════════════════════════════════════════════════════════════════
# project_updates
# ═════════════════════════════════════════════════════════════════════


class ProjectUpdateRecord(_Timestamps, Base):
    __tablename__ = PROJECT_UPDATES

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("profiles.id"), nullable=False,
    )
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    work_location: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    images: Mapped[Optional[list[str]]] = mapped_column(
        sa.JSON().with_variant(ARRAY(sa.Text), "postgresql"),
    )
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="draft")

    employee: Mapped[ProfileRecord] = relationship(foreign_keys=[employee_id])


RECORDS: dict[str, type[Base]] = {
    PROFILES: ProfileRecord,
    LEAVE_REQUESTS: LeaveRequestRecord,
    TASKS: TaskRecord,
    ANNOUNCEMENTS: AnnouncementRecord,
    PROJECT_UPDATES: ProjectUpdateRecord,
}
