"""Dashboard service — cached aggregation over the remote data client.

Statistics fan out as concurrent queries (``asyncio.gather``) and are
reduced into chart-ready shapes. A failure in any sub-query aborts the
whole aggregation; nothing is cached in that case.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional, Sequence

from portal.client.base import DataClient
from portal.client.query import (
    ANNOUNCEMENTS,
    LEAVE_REQUESTS,
    PROFILES,
    PROJECT_UPDATES,
    TASKS,
    Query,
)
from portal.client.rows import Announcement, LeaveRequest, Profile, Task
from portal.common.cache import DataCache
from portal.common.constants import (
    ANNOUNCEMENT_PREVIEW_CHARS,
    MANAGE_ROLES,
    RECENT_ACTIVITY_LIMIT,
    REPORT_DEFAULT_DAYS,
    UPCOMING_DEADLINE_DAYS,
    LeaveStatus,
    ProjectUpdateStatus,
    TaskStatus,
    UserRole,
)
from portal.dashboard.schemas import (
    DashboardStats,
    EmployeeReport,
    LeaveReport,
    NamedValue,
    ProjectReport,
    RecentActivity,
    ReportsSummary,
    StatusBucket,
    TaskReport,
)

logger = logging.getLogger(__name__)

OPEN_TASK_STATUSES = [TaskStatus.pending, TaskStatus.in_progress]

# (status, label, chart colour) in display order
TASK_STATUS_BUCKETS: list[tuple[TaskStatus, str, str]] = [
    (TaskStatus.pending, "Pending", "#f59e0b"),
    (TaskStatus.in_progress, "In Progress", "#3b82f6"),
    (TaskStatus.completed, "Completed", "#10b981"),
]


def _today() -> date:
    return date.today()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DashboardService:
    """Async dashboard aggregation plus cached directory and list accessors."""

    def __init__(self, client: DataClient, cache: DataCache) -> None:
        self.client = client
        self.cache = cache

    # ═════════════════════════════════════════════════════════════════
    # GET /stats
    # ═════════════════════════════════════════════════════════════════

    async def get_dashboard_stats(
        self,
        user_id: uuid.UUID,
        role: UserRole,
        department: str,
    ) -> DashboardStats:
        """Return KPI metrics for *user_id*, served from cache when fresh."""
        cached = self.cache.get_dashboard_stats(user_id)
        if cached is not None:
            return cached

        count = self.client.count
        select = self.client.select

        # All sub-queries are created up front and awaited jointly
        results = await asyncio.gather(
            count(Query(table=PROFILES, filters={"is_active": True})),
            count(Query(table=LEAVE_REQUESTS, filters={"status": LeaveStatus.pending})),
            count(Query(table=TASKS, filters={"status__in": OPEN_TASK_STATUSES})),
            count(Query(table=ANNOUNCEMENTS)),
            select(Query(
                table=LEAVE_REQUESTS,
                columns=["id"],
                embed=["employee"],
                filters={"status": LeaveStatus.approved},
            )),
            select(Query(table=TASKS, columns=["status"])),
            count(Query(
                table=TASKS,
                filters={"assigned_to": user_id, "status__in": OPEN_TASK_STATUSES},
            )),
            count(Query(
                table=LEAVE_REQUESTS,
                filters={"employee_id": user_id, "status": LeaveStatus.pending},
            )),
            self._team_size(role, department),
            self._upcoming_deadlines(user_id),
        )
        (
            total_employees,
            pending_leaves,
            active_tasks,
            announcements,
            approved_leaves,
            task_statuses,
            my_tasks,
            my_pending_leaves,
            team_size,
            upcoming_deadlines,
        ) = results

        stats = DashboardStats(
            total_employees=total_employees,
            pending_leaves=pending_leaves,
            active_tasks=active_tasks,
            recent_announcements=announcements,
            leaves_by_department=leaves_by_department(approved_leaves.rows),
            tasks_by_status=tasks_by_status(row.status for row in task_statuses.rows),
            my_tasks=my_tasks,
            my_pending_leaves=my_pending_leaves,
            team_size=team_size,
            upcoming_deadlines=upcoming_deadlines,
        )

        self.cache.set_dashboard_stats(user_id, stats)
        return stats

    async def _team_size(self, role: UserRole, department: str) -> int:
        if role not in MANAGE_ROLES:
            return 0
        return await self.client.count(Query(
            table=PROFILES,
            filters={"department": department, "is_active": True},
        ))

    async def _upcoming_deadlines(self, user_id: uuid.UUID) -> int:
        horizon = _today() + timedelta(days=UPCOMING_DEADLINE_DAYS)
        return await self.client.count(Query(
            table=TASKS,
            filters={
                "assigned_to": user_id,
                "due_date__to": horizon,
                "status__in": OPEN_TASK_STATUSES,
            },
        ))

    # ═════════════════════════════════════════════════════════════════
    # GET /recent-activity
    # ═════════════════════════════════════════════════════════════════

    async def get_recent_activity(
        self,
        user_id: uuid.UUID,
        department: Optional[str] = None,
    ) -> list[RecentActivity]:
        """Newest tasks, leave requests and announcements for the user, merged (never cached)."""
        announcement_query = Query(table=ANNOUNCEMENTS, order_by="-created_at", limit=2)
        if department is not None:
            announcement_query.any_of = [
                {"department__isnull": True},
                {"department": department},
            ]

        tasks, leaves, announcements = await asyncio.gather(
            self.client.select(Query(
                table=TASKS,
                filters={"assigned_to": user_id},
                order_by="-created_at",
                limit=3,
            )),
            self.client.select(Query(
                table=LEAVE_REQUESTS,
                filters={"employee_id": user_id},
                order_by="-created_at",
                limit=2,
            )),
            self.client.select(announcement_query),
        )

        activities = (
            [_task_activity(t) for t in tasks.rows]
            + [_leave_activity(lv) for lv in leaves.rows]
            + [_announcement_activity(a) for a in announcements.rows]
        )
        activities.sort(key=lambda item: item.timestamp, reverse=True)
        return activities[:RECENT_ACTIVITY_LIMIT]

    # ═════════════════════════════════════════════════════════════════
    # GET /reports
    # ═════════════════════════════════════════════════════════════════

    async def get_reports(
        self,
        days: int = REPORT_DEFAULT_DAYS,
        department: Optional[str] = None,
    ) -> ReportsSummary:
        """Analytics over the last *days* days, optionally for one department (never cached)."""
        since = _now() - timedelta(days=days)
        today = _today()
        scope = {"department": department} if department else {}
        count = self.client.count
        select = self.client.select

        (
            total_profiles,
            active_profiles,
            staff,
            new_hires,
            leaves,
            tasks,
            projects,
            active_departments,
        ) = await asyncio.gather(
            count(Query(table=PROFILES, filters=scope)),
            count(Query(table=PROFILES, filters={**scope, "is_active": True})),
            select(Query(
                table=PROFILES,
                columns=["department", "role"],
                filters={**scope, "is_active": True},
            )),
            count(Query(
                table=PROFILES,
                filters={**scope, "joining_date__from": today.replace(day=1)},
            )),
            select(Query(
                table=LEAVE_REQUESTS,
                columns=["status", "leave_type", "days_count"],
                embed=["employee"],
                filters={"created_at__from": since},
            )),
            select(Query(
                table=TASKS,
                columns=["status", "priority", "due_date"],
                filters={**scope, "created_at__from": since},
            )),
            select(Query(
                table=PROJECT_UPDATES,
                columns=["status", "work_location"],
                embed=["employee"],
                filters={"created_at__from": since},
            )),
            select(Query(table=PROFILES, columns=["department"], filters={"is_active": True})),
        )

        # Leave and project rows carry the department on the embedded requester
        leave_rows = _in_department(leaves.rows, department)
        project_rows = _in_department(projects.rows, department)

        return ReportsSummary(
            days=days,
            department=department,
            departments=sorted(count_by(row.department for row in active_departments.rows)),
            employees=EmployeeReport(
                total=total_profiles,
                active=active_profiles,
                new_hires_this_month=new_hires,
                by_department=colored_slices(count_by(row.department for row in staff.rows)),
                by_role=[
                    NamedValue(name=role.replace("_", " ").upper(), value=value)
                    for role, value in count_by(row.role.value for row in staff.rows).items()
                ],
            ),
            leaves=leave_report(leave_rows),
            tasks=task_report(tasks.rows, today),
            projects=project_report(project_rows),
        )

    # ═════════════════════════════════════════════════════════════════
    # Cached collections
    # ═════════════════════════════════════════════════════════════════

    async def get_employees(self) -> list[Profile]:
        """Active profiles ordered by name (cached with the default TTL)."""
        cached = self.cache.get_profiles()
        if cached is not None:
            return cached

        result = await self.client.select(Query(
            table=PROFILES,
            filters={"is_active": True},
            order_by="full_name",
        ))
        self.cache.set_profiles(result.rows)
        return result.rows

    async def get_tasks(self, user_id: uuid.UUID, role: UserRole) -> list[Task]:
        """Tasks for the user's role with both profiles embedded (cached per user)."""
        cached = self.cache.get_tasks(user_id)
        if cached is not None:
            return cached

        query = Query(table=TASKS, embed=["assignee", "assigner"], order_by="-created_at")
        if role == UserRole.employee:
            query.any_of = [{"assigned_to": user_id}, {"assigned_by": user_id}]

        result = await self.client.select(query)
        self.cache.set_tasks(user_id, result.rows)
        return result.rows

    async def get_leave_requests(self, user_id: uuid.UUID, role: UserRole) -> list[LeaveRequest]:
        """Leave requests for the user's role with the requester embedded (cached per user)."""
        cached = self.cache.get_leave_requests(user_id)
        if cached is not None:
            return cached

        query = Query(table=LEAVE_REQUESTS, embed=["employee"], order_by="-created_at")
        if role == UserRole.employee:
            query.filters = {"employee_id": user_id}

        result = await self.client.select(query)
        self.cache.set_leave_requests(user_id, result.rows)
        return result.rows

    # ═════════════════════════════════════════════════════════════════
    # Invalidation
    # ═════════════════════════════════════════════════════════════════

    def invalidate_cache(self, scope: str, user_id: Optional[uuid.UUID] = None) -> None:
        """Called by mutation handlers.

        ``"user"`` clears one user's entries, ``"global"`` the org-wide data and
        ``"tasks"`` or ``"leaves"`` every cached list of that kind.
        """
        if scope == "user":
            if user_id is not None:
                self.cache.invalidate_user_data(user_id)
        elif scope == "global":
            self.cache.invalidate_global_data()
        elif scope == "tasks":
            self.cache.invalidate_task_lists()
        elif scope == "leaves":
            self.cache.invalidate_leave_lists()
        else:
            raise ValueError(f"Unknown cache scope '{scope}'")
        logger.debug("Invalidated %s cache data (user=%s)", scope, user_id)


# ═════════════════════════════════════════════════════════════════════
# Reducers
# ═════════════════════════════════════════════════════════════════════


def leaves_by_department(rows: Sequence[LeaveRequest]) -> list[NamedValue]:
    """Count rows per requester department, keeping first-encountered order."""
    buckets: dict[str, NamedValue] = {}
    for row in rows:
        department = row.employee.department if row.employee is not None else None
        if not department:
            continue
        bucket = buckets.get(department)
        if bucket is None:
            buckets[department] = NamedValue(name=department, value=1)
        else:
            bucket.value += 1
    return list(buckets.values())


def tasks_by_status(statuses) -> list[StatusBucket]:
    """Exactly three buckets, zero-filled."""
    counts = {status: 0 for status, _, _ in TASK_STATUS_BUCKETS}
    for status in statuses:
        if status in counts:
            counts[status] += 1
    return [
        StatusBucket(name=label, value=counts[status], color=color)
        for status, label, color in TASK_STATUS_BUCKETS
    ]


# Cycled through for report breakdowns in first-encountered order
REPORT_COLORS = [
    "#3b82f6", "#10b981", "#f59e0b", "#ef4444",
    "#8b5cf6", "#ec4899", "#6366f1", "#14b8a6",
]


def count_by(values: Iterable[Optional[str]]) -> dict[str, int]:
    """Tally non-empty values, keeping first-encountered order."""
    counts: dict[str, int] = {}
    for value in values:
        if value:
            counts[value] = counts.get(value, 0) + 1
    return counts


def colored_slices(
    counts: dict[str, int],
    label: Callable[[str], str] = str,
) -> list[StatusBucket]:
    return [
        StatusBucket(name=label(name), value=value, color=REPORT_COLORS[i % len(REPORT_COLORS)])
        for i, (name, value) in enumerate(counts.items())
    ]


def leave_report(rows: Sequence[Any]) -> LeaveReport:
    statuses = count_by(row.status.value for row in rows)
    total_days = sum(row.days_count or 0 for row in rows)
    return LeaveReport(
        total=len(rows),
        approved=statuses.get(LeaveStatus.approved.value, 0),
        pending=statuses.get(LeaveStatus.pending.value, 0),
        rejected=statuses.get(LeaveStatus.rejected.value, 0),
        by_type=colored_slices(count_by(row.leave_type.value for row in rows), str.upper),
        average_days=total_days / len(rows) if rows else 0.0,
    )


def task_report(rows: Sequence[Any], today: date) -> TaskReport:
    statuses = count_by(row.status.value for row in rows)
    completed = statuses.get(TaskStatus.completed.value, 0)
    overdue = sum(
        1 for row in rows
        if row.status != TaskStatus.completed and row.due_date is not None and row.due_date < today
    )
    return TaskReport(
        total=len(rows),
        completed=completed,
        pending=statuses.get(TaskStatus.pending.value, 0),
        overdue=overdue,
        by_priority=colored_slices(count_by(row.priority.value for row in rows), str.upper),
        completion_rate=completed / len(rows) * 100 if rows else 0.0,
    )


def project_report(rows: Sequence[Any]) -> ProjectReport:
    statuses = count_by(row.status.value for row in rows)
    return ProjectReport(
        total=len(rows),
        approved=statuses.get(ProjectUpdateStatus.approved.value, 0),
        draft=statuses.get(ProjectUpdateStatus.draft.value, 0),
        submitted=statuses.get(ProjectUpdateStatus.submitted.value, 0),
        by_location=[
            NamedValue(name=name, value=value)
            for name, value in count_by(row.work_location for row in rows).items()
        ],
    )


def _in_department(rows: Sequence[Any], department: Optional[str]) -> list[Any]:
    if not department:
        return list(rows)
    return [
        row for row in rows
        if row.employee is not None and row.employee.department == department
    ]


def _task_activity(task: Task) -> RecentActivity:
    return RecentActivity(
        id=task.id,
        type="task",
        title=task.title,
        description=task.description or "",
        timestamp=task.created_at,
        status=task.status.value,
        priority=task.priority.value,
    )


def _leave_activity(leave: LeaveRequest) -> RecentActivity:
    return RecentActivity(
        id=leave.id,
        type="leave",
        title=f"{leave.leave_type.value.capitalize()} Leave Request",
        description=f"{leave.start_date.isoformat()} to {leave.end_date.isoformat()}",
        timestamp=leave.created_at,
        status=leave.status.value,
    )


def _announcement_activity(announcement: Announcement) -> RecentActivity:
    content = announcement.content or ""
    if len(content) > ANNOUNCEMENT_PREVIEW_CHARS:
        content = content[:ANNOUNCEMENT_PREVIEW_CHARS] + "..."
    return RecentActivity(
        id=announcement.id,
        type="announcement",
        title=announcement.title,
        description=content,
        timestamp=announcement.created_at,
        priority="high" if announcement.is_priority else None,
    )
