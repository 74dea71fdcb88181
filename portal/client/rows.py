"""Typed row models for every backend table.

Everything the data clients return passes through ``to_row`` so that the
service layer works with pydantic models instead of raw dicts.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, create_model, field_validator

from portal.client.query import (
    ANNOUNCEMENTS,
    LEAVE_REQUESTS,
    PROFILES,
    PROJECT_UPDATES,
    TASKS,
)
from portal.common.constants import (
    LeaveStatus,
    LeaveType,
    ProjectUpdateStatus,
    TaskPriority,
    TaskStatus,
    UserRole,
)


class _Row(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


# ═════════════════════════════════════════════════════════════════════
# Profile
# ═════════════════════════════════════════════════════════════════════


class Profile(_Row):
    """One profile per authenticated identity."""

    id: uuid.UUID
    email: str
    full_name: str
    role: UserRole = UserRole.employee
    department: str
    job_title: str
    joining_date: date
    location: str
    phone: Optional[str] = None
    reporting_to: Optional[uuid.UUID] = None
    profile_picture: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ═════════════════════════════════════════════════════════════════════
# Leave request
# ═════════════════════════════════════════════════════════════════════


class LeaveRequest(_Row):
    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    days_count: int
    reason: str
    status: LeaveStatus = LeaveStatus.pending
    manager_id: Optional[uuid.UUID] = None
    manager_comments: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    employee: Optional[Profile] = None
    manager: Optional[Profile] = None


# ═════════════════════════════════════════════════════════════════════
# Task
# ═════════════════════════════════════════════════════════════════════


class Task(_Row):
    id: uuid.UUID
    title: str
    description: str
    assigned_to: uuid.UUID
    assigned_by: uuid.UUID
    due_date: Optional[date] = None
    priority: TaskPriority = TaskPriority.medium
    status: TaskStatus = TaskStatus.pending
    department: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    assignee: Optional[Profile] = None
    assigner: Optional[Profile] = None


# ═════════════════════════════════════════════════════════════════════
# Announcement
# ═════════════════════════════════════════════════════════════════════


class Announcement(_Row):
    id: uuid.UUID
    title: str
    content: str
    author_id: uuid.UUID
    department: Optional[str] = Field(None, description="None = company-wide")
    attachment_url: Optional[str] = None
    is_priority: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    author: Optional[Profile] = None


# ═════════════════════════════════════════════════════════════════════
# Project update
# ═════════════════════════════════════════════════════════════════════


class ProjectUpdate(_Row):
    id: uuid.UUID
    employee_id: uuid.UUID
    title: str
    description: str
    work_location: str
    images: list[str] = Field(default_factory=list)
    status: ProjectUpdateStatus = ProjectUpdateStatus.draft
    created_at: datetime
    updated_at: Optional[datetime] = None

    employee: Optional[Profile] = None

    @field_validator("images", mode="before")
    @classmethod
    def _null_images(cls, value: Any) -> Any:
        return [] if value is None else value


# ── Table → row type mapping ────────────────────────────────────────

ROW_TYPES: dict[str, type[_Row]] = {
    PROFILES: Profile,
    LEAVE_REQUESTS: LeaveRequest,
    TASKS: Task,
    ANNOUNCEMENTS: Announcement,
    PROJECT_UPDATES: ProjectUpdate,
}


@lru_cache(maxsize=64)
def partial_row_type(table: str, columns: tuple[str, ...]) -> type[BaseModel]:
    """Model carrying only *columns* of *table* (for narrow selects)."""
    full = ROW_TYPES[table]
    fields: dict[str, Any] = {}
    for name in columns:
        info = full.model_fields.get(name)
        if info is None:
            raise ValueError(f"Table '{table}' has no column '{name}'")
        fields[name] = (info.annotation, ...)
    return create_model(  # type: ignore[call-overload]
        f"{full.__name__}Slice",
        __config__=ConfigDict(from_attributes=True, extra="ignore"),
        **fields,
    )


def to_row(
    table: str,
    data: Any,
    columns: Optional[Sequence[str]] = None,
) -> BaseModel:
    """Validate one raw backend row into its typed model."""
    if columns:
        return partial_row_type(table, tuple(columns)).model_validate(data)
    return ROW_TYPES[table].model_validate(data)
