"""Profiles router — employee directory and self-service profile edits.

Routes:
    /profiles        — Directory of active employees (cached)
    /profiles/me     — Update the caller's own contact fields
    /profiles/{id}   — Single profile
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from portal.auth.dependencies import get_current_user
from portal.client.base import DataClient
from portal.client.rows import Profile
from portal.dashboard.service import DashboardService
from portal.dependencies import get_dashboard_service, get_data_client
from portal.profiles.schemas import ProfileSelfUpdate
from portal.profiles.service import ProfileService

router = APIRouter()


# ── GET /profiles ───────────────────────────────────────────────────

@router.get("", response_model=list[Profile])
async def list_profiles(
    search: Optional[str] = Query(None, description="Name, job title or department"),
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    _profile: Profile = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Directory of active employees ordered by name."""
    return await ProfileService.list_directory(
        dashboard, search=search, department=department, location=location,
    )


# ── PATCH /profiles/me ──────────────────────────────────────────────

@router.patch("/me", response_model=Profile)
async def update_me(
    body: ProfileSelfUpdate,
    profile: Profile = Depends(get_current_user),
    client: DataClient = Depends(get_data_client),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return await ProfileService.update_own_profile(client, dashboard, profile, body)


# ── GET /profiles/{id} ──────────────────────────────────────────────

@router.get("/{profile_id}", response_model=Profile)
async def get_profile(
    profile_id: uuid.UUID,
    _profile: Profile = Depends(get_current_user),
    client: DataClient = Depends(get_data_client),
):
    return await ProfileService.get_profile(client, profile_id)
