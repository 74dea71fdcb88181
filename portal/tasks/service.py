"""Task service — assignment and status progress."""

from __future__ import annotations

import logging
import uuid

from portal.client.base import DataClient
from portal.client.errors import RemoteError
from portal.client.query import PROFILES, TASKS, Query
from portal.client.rows import Profile, Task
from portal.common.constants import DEFAULT_DEPARTMENT, TASK_TRANSITIONS, TaskStatus, UserRole
from portal.common.exceptions import ForbiddenException, ValidationException
from portal.common.lookup import get_or_404
from portal.common.validation import check_transition, require_fields
from portal.common.visibility import can_view_task, filter_visible
from portal.dashboard.service import DashboardService
from portal.tasks.schemas import TaskCreate, TaskStatusUpdate

logger = logging.getLogger(__name__)


class TaskService:
    """Async operations for tasks."""

    @staticmethod
    async def list_tasks(dashboard: DashboardService, viewer: Profile) -> list[Task]:
        rows = await dashboard.get_tasks(viewer.id, viewer.role)
        return filter_visible(viewer, rows)

    # ── Assign ──────────────────────────────────────────────────────

    @staticmethod
    async def create_task(
        client: DataClient,
        dashboard: DashboardService,
        assigner: Profile,
        data: TaskCreate,
    ) -> Task:
        """Assign a new task. It inherits the assigner's department."""
        require_fields(data.model_dump(), "title", "description", "assigned_to")
        await _ensure_assignee(client, assigner, data.assigned_to)

        task = await client.insert(TASKS, {
            "title": data.title.strip(),
            "description": data.description.strip(),
            "assigned_to": data.assigned_to,
            "assigned_by": assigner.id,
            "due_date": data.due_date,
            "priority": data.priority,
            "department": assigner.department or DEFAULT_DEPARTMENT,
            "status": TaskStatus.pending,
        })
        for user_id in {task.assigned_to, task.assigned_by}:
            dashboard.invalidate_cache("user", user_id)
        dashboard.invalidate_cache("tasks")
        logger.info("Task %s assigned to %s by %s", task.id, task.assigned_to, assigner.id)
        return task

    # ── Progress ────────────────────────────────────────────────────

    @staticmethod
    async def update_status(
        client: DataClient,
        dashboard: DashboardService,
        task_id: uuid.UUID,
        actor: Profile,
        data: TaskStatusUpdate,
    ) -> Task:
        current = await get_or_404(client, TASKS, task_id, "Task")
        if not can_view_task(actor, current):
            raise ForbiddenException("You cannot update a task you are not involved in.")
        check_transition(TASK_TRANSITIONS, current.status, data.status)

        task = await client.update(TASKS, {"status": data.status}, match={"id": task_id})
        for user_id in {current.assigned_to, current.assigned_by, actor.id}:
            dashboard.invalidate_cache("user", user_id)
        dashboard.invalidate_cache("tasks")
        return task


async def _ensure_assignee(client: DataClient, assigner: Profile, profile_id: uuid.UUID) -> None:
    """Assignee must be active; managers assign only within their own department."""
    try:
        assignee = await client.fetch_one(Query(
            table=PROFILES, columns=["id", "is_active", "department"], filters={"id": profile_id},
        ))
    except RemoteError as exc:
        if not exc.is_not_found:
            raise
        assignee = None
    if assignee is None or not assignee.is_active:
        raise ValidationException({"assigned_to": ["Invalid employee selected."]})
    if assigner.role == UserRole.manager and assignee.department != assigner.department:
        raise ValidationException(
            {"assigned_to": ["You can only assign tasks to employees in your department."]},
        )
