"""Profile service — the employee directory and self-service edits."""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

from portal.client.base import DataClient
from portal.client.query import PROFILES
from portal.client.rows import Profile
from portal.common.lookup import get_or_404
from portal.dashboard.service import DashboardService
from portal.profiles.schemas import ProfileSelfUpdate


def matches_search(profile: Profile, term: str, fields: Iterable[str]) -> bool:
    """Case-insensitive substring match of *term* against any of *fields*."""
    needle = term.lower()
    return any(needle in (getattr(profile, name) or "").lower() for name in fields)


class ProfileService:
    """Directory reads and self-service profile updates."""

    # ── Directory ───────────────────────────────────────────────────

    @staticmethod
    async def list_directory(
        dashboard: DashboardService,
        *,
        search: Optional[str] = None,
        department: Optional[str] = None,
        location: Optional[str] = None,
    ) -> list[Profile]:
        """Active employees from the cached list, narrowed in memory."""
        profiles = await dashboard.get_employees()
        if search:
            profiles = [
                p for p in profiles
                if matches_search(p, search, ("full_name", "job_title", "department"))
            ]
        if department:
            profiles = [p for p in profiles if p.department == department]
        if location:
            profiles = [p for p in profiles if p.location == location]
        return profiles

    @staticmethod
    async def get_profile(client: DataClient, profile_id: uuid.UUID) -> Profile:
        return await get_or_404(client, PROFILES, profile_id, "Profile")

    # ── Self-service ────────────────────────────────────────────────

    @staticmethod
    async def update_own_profile(
        client: DataClient,
        dashboard: DashboardService,
        profile: Profile,
        data: ProfileSelfUpdate,
    ) -> Profile:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return profile

        updated = await client.update(PROFILES, changes, match={"id": profile.id})
        # The directory list is shared by everyone
        dashboard.invalidate_cache("global")
        return updated
