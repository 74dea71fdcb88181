"""Leave router — file requests and approve/reject them.

All endpoints require authentication. The decision endpoint is limited to
managers and super admins.
"""

import uuid

from fastapi import APIRouter, Depends

from portal.auth.dependencies import get_current_user, require_role
from portal.client.base import DataClient
from portal.client.rows import LeaveRequest, Profile
from portal.common.constants import UserRole
from portal.dashboard.service import DashboardService
from portal.dependencies import get_dashboard_service, get_data_client
from portal.leave.schemas import LeaveDecision, LeaveRequestCreate
from portal.leave.service import LeaveService

router = APIRouter()


# ── GET /leave ──────────────────────────────────────────────────────

@router.get("", response_model=list[LeaveRequest])
async def list_leave_requests(
    profile: Profile = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Own requests for employees; every request for managers and admins."""
    return await LeaveService.list_leave_requests(dashboard, profile)


# ── POST /leave ─────────────────────────────────────────────────────

@router.post("", response_model=LeaveRequest, status_code=201)
async def apply_leave(
    body: LeaveRequestCreate,
    profile: Profile = Depends(get_current_user),
    client: DataClient = Depends(get_data_client),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """File a leave request. The day count is derived from the date range."""
    return await LeaveService.apply_leave(client, dashboard, profile, body)


# ── PUT /leave/{id}/status ──────────────────────────────────────────

@router.put("/{request_id}/status", response_model=LeaveRequest)
async def decide_leave(
    request_id: uuid.UUID,
    body: LeaveDecision,
    manager: Profile = Depends(require_role(UserRole.manager, UserRole.super_admin)),
    client: DataClient = Depends(get_data_client),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Approve or reject a pending request."""
    return await LeaveService.decide(client, dashboard, request_id, manager, body)
