"""Announcements router — read the feed, publish (super admins only)."""

from fastapi import APIRouter, Depends

from portal.announcements.schemas import AnnouncementCreate
from portal.announcements.service import AnnouncementService
from portal.auth.dependencies import get_current_user, require_role
from portal.client.base import DataClient
from portal.client.rows import Announcement, Profile
from portal.common.constants import UserRole
from portal.dashboard.service import DashboardService
from portal.dependencies import get_dashboard_service, get_data_client

router = APIRouter()


@router.get("", response_model=list[Announcement])
async def list_announcements(
    profile: Profile = Depends(get_current_user),
    client: DataClient = Depends(get_data_client),
):
    return await AnnouncementService.list_announcements(client, profile)


@router.post("", response_model=Announcement, status_code=201)
async def publish_announcement(
    body: AnnouncementCreate,
    author: Profile = Depends(require_role(UserRole.super_admin)),
    client: DataClient = Depends(get_data_client),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Publish to the whole company or a single department."""
    return await AnnouncementService.publish(client, dashboard, author, body)
