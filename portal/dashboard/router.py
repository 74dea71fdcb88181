"""Dashboard router — statistics cards, the recent-activity feed and reports.

All endpoints require authentication. Statistics are cached per user for a
short TTL; the activity feed and reports are always live.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from portal.auth.dependencies import get_current_user, require_role
from portal.client.rows import Profile
from portal.common.constants import REPORT_DEFAULT_DAYS, REPORT_MAX_DAYS, UserRole
from portal.dashboard.schemas import DashboardStats, RecentActivity, ReportsSummary
from portal.dashboard.service import DashboardService
from portal.dependencies import get_dashboard_service

router = APIRouter()


# ── GET /stats ──────────────────────────────────────────────────────

@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    profile: Profile = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Organisation counts, chart breakdowns and the caller's personal counts."""
    return await service.get_dashboard_stats(profile.id, profile.role, profile.department)


# ── GET /recent-activity ────────────────────────────────────────────

@router.get("/recent-activity", response_model=list[RecentActivity])
async def recent_activity(
    profile: Profile = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Five newest items across the caller's tasks, leave requests and visible announcements."""
    department = None if profile.role == UserRole.super_admin else profile.department
    return await service.get_recent_activity(profile.id, department)


# ── GET /reports ────────────────────────────────────────────────────

@router.get("/reports", response_model=ReportsSummary)
async def reports(
    days: int = Query(REPORT_DEFAULT_DAYS, ge=1, le=REPORT_MAX_DAYS),
    department: Optional[str] = Query(None, max_length=100),
    profile: Profile = Depends(require_role(UserRole.manager, UserRole.super_admin)),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Employee, leave, task and project analytics; managers and admins only.

    ``department=all`` (or no value) reports on the whole organisation.
    """
    if not department or department == "all":
        department = None
    return await service.get_reports(days, department)
