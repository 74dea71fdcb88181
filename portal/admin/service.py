"""Admin service — profile management for managers and super admins.

Every mutation clears the org-wide cache entries (the directory list and
all dashboard statistics), since headcounts and departments feed both.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from portal.admin.schemas import AdminStats, ProfileCreate, ProfileUpdate
from portal.client.base import DataClient
from portal.client.errors import RemoteError
from portal.client.query import PROFILES, Query
from portal.client.rows import Profile
from portal.common.constants import UserRole
from portal.common.exceptions import NotFoundException
from portal.common.lookup import get_or_404
from portal.common.validation import require_fields
from portal.dashboard.service import DashboardService
from portal.profiles.service import matches_search

logger = logging.getLogger(__name__)


class AdminService:
    """Static service class for admin operations."""

    # ── Reads ───────────────────────────────────────────────────────

    @staticmethod
    async def list_profiles(
        client: DataClient,
        *,
        search: Optional[str] = None,
        department: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> list[Profile]:
        """All profiles, active or not, newest first."""
        result = await client.select(Query(table=PROFILES, order_by="-created_at"))
        profiles = result.rows
        if search:
            profiles = [
                p for p in profiles
                if matches_search(p, search, ("full_name", "email", "department"))
            ]
        if department:
            profiles = [p for p in profiles if p.department == department]
        if role is not None:
            profiles = [p for p in profiles if p.role == role]
        return profiles

    @staticmethod
    async def get_stats(client: DataClient) -> AdminStats:
        result = await client.select(Query(table=PROFILES, columns=["role", "is_active"]))
        stats = AdminStats(total=len(result.rows))
        for row in result.rows:
            if row.is_active:
                stats.active += 1
            else:
                stats.inactive += 1
            if row.role == UserRole.super_admin:
                stats.admins += 1
            elif row.role == UserRole.manager:
                stats.managers += 1
            else:
                stats.employees += 1
        return stats

    # ── Mutations ───────────────────────────────────────────────────

    @staticmethod
    async def create_profile(
        client: DataClient,
        dashboard: DashboardService,
        data: ProfileCreate,
        *,
        actor_id: uuid.UUID,
    ) -> Profile:
        values = data.model_dump(exclude_none=True)
        require_fields(values, "email", "full_name", "department")

        profile = await client.insert(PROFILES, values)
        dashboard.invalidate_cache("global")
        logger.info("Profile %s created by %s", profile.id, actor_id)
        return profile

    @staticmethod
    async def update_profile(
        client: DataClient,
        dashboard: DashboardService,
        profile_id: uuid.UUID,
        data: ProfileUpdate,
    ) -> Profile:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return await get_or_404(client, PROFILES, profile_id, "Profile")

        try:
            profile = await client.update(PROFILES, changes, match={"id": profile_id})
        except RemoteError as exc:
            if exc.is_not_found:
                raise NotFoundException("Profile", str(profile_id)) from exc
            raise
        dashboard.invalidate_cache("global")
        dashboard.invalidate_cache("user", profile_id)
        return profile

    @staticmethod
    async def toggle_active(
        client: DataClient,
        dashboard: DashboardService,
        profile_id: uuid.UUID,
        *,
        actor_id: uuid.UUID,
    ) -> Profile:
        """Flip ``is_active``. Profiles are deactivated, never deleted."""
        current = await get_or_404(client, PROFILES, profile_id, "Profile")
        profile = await client.update(
            PROFILES, {"is_active": not current.is_active}, match={"id": profile_id},
        )
        dashboard.invalidate_cache("global")
        dashboard.invalidate_cache("user", profile_id)
        logger.info(
            "Profile %s %s by %s",
            profile_id, "activated" if profile.is_active else "deactivated", actor_id,
        )
        return profile
