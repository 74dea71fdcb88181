"""Admin router — profile management and headcount stats.

All endpoints require the manager or super_admin role.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from portal.admin.schemas import AdminStats, ProfileCreate, ProfileUpdate
from portal.admin.service import AdminService
from portal.auth.dependencies import require_role
from portal.client.base import DataClient
from portal.client.rows import Profile
from portal.common.constants import UserRole
from portal.common.rate_limit import ADMIN_WRITE_LIMIT, limiter
from portal.dashboard.service import DashboardService
from portal.dependencies import get_dashboard_service, get_data_client

router = APIRouter()

_admin_dep = require_role(UserRole.manager, UserRole.super_admin)


# ═══════════════════════════════════════════════════════════════════
# PROFILES
# ═══════════════════════════════════════════════════════════════════

@router.get("/profiles", response_model=list[Profile])
async def list_profiles(
    search: Optional[str] = Query(None, description="Name, email or department"),
    department: Optional[str] = Query(None),
    role: Optional[UserRole] = Query(None),
    _user: Profile = Depends(_admin_dep),
    client: DataClient = Depends(get_data_client),
):
    """List all profiles (active + inactive), newest first."""
    return await AdminService.list_profiles(
        client, search=search, department=department, role=role,
    )


@router.post("/profiles", response_model=Profile, status_code=201)
@limiter.limit(ADMIN_WRITE_LIMIT)
async def create_profile(
    request: Request,
    body: ProfileCreate,
    user: Profile = Depends(_admin_dep),
    client: DataClient = Depends(get_data_client),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Create a profile record. Email, full name and department are required."""
    return await AdminService.create_profile(client, dashboard, body, actor_id=user.id)


@router.put("/profiles/{profile_id}", response_model=Profile)
async def update_profile(
    profile_id: uuid.UUID,
    body: ProfileUpdate,
    _user: Profile = Depends(_admin_dep),
    client: DataClient = Depends(get_data_client),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await AdminService.update_profile(client, dashboard, profile_id, body)


@router.post("/profiles/{profile_id}/toggle-active", response_model=Profile)
async def toggle_active(
    profile_id: uuid.UUID,
    user: Profile = Depends(_admin_dep),
    client: DataClient = Depends(get_data_client),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Activate an inactive profile or deactivate an active one."""
    return await AdminService.toggle_active(client, dashboard, profile_id, actor_id=user.id)


# ═══════════════════════════════════════════════════════════════════
# STATS
# ═══════════════════════════════════════════════════════════════════

@router.get("/stats", response_model=AdminStats)
async def admin_stats(
    _user: Profile = Depends(_admin_dep),
    client: DataClient = Depends(get_data_client),
):
    """Active / inactive and per-role profile counts."""
    return await AdminService.get_stats(client)
