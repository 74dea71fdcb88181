"""Enums and constants for the workforce portal — matching the backend's check constraints."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    manager = "manager"
    super_admin = "super_admin"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    sick = "sick"
    vacation = "vacation"
    personal = "personal"
    emergency = "emergency"


class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# ── Tasks ───────────────────────────────────────────────────────────

class TaskPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class TaskStatus(str, enum.Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


# ── Project updates ─────────────────────────────────────────────────

class ProjectUpdateStatus(str, enum.Enum):
    draft = "draft"
    submitted = "submitted"
    approved = "approved"


# ── Allowed status transitions ──────────────────────────────────────

LEAVE_TRANSITIONS: dict[LeaveStatus, set[LeaveStatus]] = {
    LeaveStatus.pending: {LeaveStatus.approved, LeaveStatus.rejected},
    LeaveStatus.approved: set(),
    LeaveStatus.rejected: set(),
}

TASK_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.pending: {TaskStatus.in_progress, TaskStatus.completed},
    TaskStatus.in_progress: {TaskStatus.completed, TaskStatus.pending},
    TaskStatus.completed: set(),
}

PROJECT_UPDATE_TRANSITIONS: dict[ProjectUpdateStatus, set[ProjectUpdateStatus]] = {
    ProjectUpdateStatus.draft: {ProjectUpdateStatus.submitted},
    ProjectUpdateStatus.submitted: {ProjectUpdateStatus.approved, ProjectUpdateStatus.draft},
    ProjectUpdateStatus.approved: set(),
}

# Roles allowed to approve, assign, review and open the admin panel
MANAGE_ROLES: frozenset[UserRole] = frozenset({UserRole.manager, UserRole.super_admin})

# ── Defaults for a profile created on first sign-in ─────────────────

DEFAULT_PROFILE_ROLE = UserRole.employee
DEFAULT_DEPARTMENT = "General"
DEFAULT_JOB_TITLE = "Employee"
DEFAULT_LOCATION = "Office"

# ── Misc constants ──────────────────────────────────────────────────

DATE_FORMAT = "%Y-%m-%d"
RECENT_ACTIVITY_LIMIT = 5
UPCOMING_DEADLINE_DAYS = 7
ANNOUNCEMENT_PREVIEW_CHARS = 100
REPORT_DEFAULT_DAYS = 30
REPORT_MAX_DAYS = 365
