"""Tasks router — list, assign and progress tasks."""

import uuid

from fastapi import APIRouter, Depends

from portal.auth.dependencies import get_current_user, require_role
from portal.client.base import DataClient
from portal.client.rows import Profile, Task
from portal.common.constants import UserRole
from portal.dashboard.service import DashboardService
from portal.dependencies import get_dashboard_service, get_data_client
from portal.tasks.schemas import TaskCreate, TaskStatusUpdate
from portal.tasks.service import TaskService

router = APIRouter()


# ── GET /tasks ──────────────────────────────────────────────────────

@router.get("", response_model=list[Task])
async def list_tasks(
    profile: Profile = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Tasks visible to the caller, newest first, with assignee and assigner embedded."""
    return await TaskService.list_tasks(dashboard, profile)


# ── POST /tasks ─────────────────────────────────────────────────────

@router.post("", response_model=Task, status_code=201)
async def create_task(
    body: TaskCreate,
    manager: Profile = Depends(require_role(UserRole.manager, UserRole.super_admin)),
    client: DataClient = Depends(get_data_client),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await TaskService.create_task(client, dashboard, manager, body)


# ── PUT /tasks/{id}/status ──────────────────────────────────────────

@router.put("/{task_id}/status", response_model=Task)
async def update_task_status(
    task_id: uuid.UUID,
    body: TaskStatusUpdate,
    profile: Profile = Depends(get_current_user),
    client: DataClient = Depends(get_data_client),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await TaskService.update_status(client, dashboard, task_id, profile, body)
