"""Dashboard Pydantic v2 schemas — response models for the dashboard endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


# ═════════════════════════════════════════════════════════════════════
# GET /stats
# ═════════════════════════════════════════════════════════════════════


class NamedValue(BaseModel):
    """One slice of a chart: label plus count."""

    name: str
    value: int = 0


class StatusBucket(NamedValue):
    """Chart slice with its colour (task statuses and report breakdowns)."""

    color: str


class DashboardStats(BaseModel):
    """Organisation-wide and personal KPI cards for one user."""

    total_employees: int = Field(0, description="Active profiles")
    pending_leaves: int = Field(0, description="Leave requests with status=pending")
    active_tasks: int = Field(0, description="Tasks pending or in progress")
    recent_announcements: int = Field(0, description="All announcements")
    leaves_by_department: list[NamedValue] = Field(
        default_factory=list,
        description="Approved leave count per requester department, first-encountered order",
    )
    tasks_by_status: list[StatusBucket] = Field(
        default_factory=list,
        description="Always exactly Pending / In Progress / Completed",
    )
    my_tasks: int = Field(0, description="Open tasks assigned to the user")
    my_pending_leaves: int = Field(0, description="User's own pending leave requests")
    team_size: int = Field(0, description="Active profiles in the user's department (managers only)")
    upcoming_deadlines: int = Field(0, description="User's open tasks due within 7 days")


# ═════════════════════════════════════════════════════════════════════
# GET /recent-activity
# ═════════════════════════════════════════════════════════════════════


class RecentActivity(BaseModel):
    """One feed entry built from a task, leave request or announcement."""

    id: uuid.UUID
    type: Literal["task", "leave", "announcement", "project"]
    title: str
    description: str = ""
    timestamp: datetime
    status: Optional[str] = None
    priority: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# GET /reports
# ═════════════════════════════════════════════════════════════════════


class EmployeeReport(BaseModel):
    total: int = Field(0, description="All profiles, active or not")
    active: int = 0
    new_hires_this_month: int = Field(0, description="Joining date on or after the 1st")
    by_department: list[StatusBucket] = Field(default_factory=list)
    by_role: list[NamedValue] = Field(default_factory=list)


class LeaveReport(BaseModel):
    total: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0
    by_type: list[StatusBucket] = Field(default_factory=list)
    average_days: float = 0.0


class TaskReport(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = Field(0, description="Not completed and due before today")
    by_priority: list[StatusBucket] = Field(default_factory=list)
    completion_rate: float = Field(0.0, description="Completed share of all tasks, in percent")


class ProjectReport(BaseModel):
    total: int = 0
    approved: int = 0
    draft: int = 0
    submitted: int = 0
    by_location: list[NamedValue] = Field(default_factory=list)


class ReportsSummary(BaseModel):
    """Organisation analytics over a trailing window, optionally for one department.

    Leave, task and project figures cover records created inside the window;
    employee figures describe the current headcount.
    """

    days: int
    department: Optional[str] = None
    departments: list[str] = Field(
        default_factory=list, description="Departments with active staff, for the filter picker",
    )
    employees: EmployeeReport = Field(default_factory=EmployeeReport)
    leaves: LeaveReport = Field(default_factory=LeaveReport)
    tasks: TaskReport = Field(default_factory=TaskReport)
    projects: ProjectReport = Field(default_factory=ProjectReport)
