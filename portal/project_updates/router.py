"""Project updates router — submit field reports, review them."""

import uuid

from fastapi import APIRouter, Depends

from portal.auth.dependencies import get_current_user, require_role
from portal.client.base import DataClient
from portal.client.rows import Profile, ProjectUpdate
from portal.common.constants import UserRole
from portal.dependencies import get_data_client
from portal.project_updates.schemas import ProjectUpdateCreate, ProjectUpdateReview
from portal.project_updates.service import ProjectUpdateService

router = APIRouter()


# ── GET /project-updates ────────────────────────────────────────────

@router.get("", response_model=list[ProjectUpdate])
async def list_project_updates(
    profile: Profile = Depends(get_current_user),
    client: DataClient = Depends(get_data_client),
):
    """Own updates; managers also see their department's, super admins see all."""
    return await ProjectUpdateService.list_updates(client, profile)


# ── POST /project-updates ───────────────────────────────────────────

@router.post("", response_model=ProjectUpdate, status_code=201)
async def submit_project_update(
    body: ProjectUpdateCreate,
    profile: Profile = Depends(get_current_user),
    client: DataClient = Depends(get_data_client),
):
    return await ProjectUpdateService.submit(client, profile, body)


# ── PUT /project-updates/{id}/status ────────────────────────────────

@router.put("/{update_id}/status", response_model=ProjectUpdate)
async def review_project_update(
    update_id: uuid.UUID,
    body: ProjectUpdateReview,
    reviewer: Profile = Depends(require_role(UserRole.manager, UserRole.super_admin)),
    client: DataClient = Depends(get_data_client),
):
    """Approve a submitted update or return it to draft."""
    return await ProjectUpdateService.review(client, update_id, reviewer, body)
