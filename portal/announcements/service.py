"""Announcement service — department-aware feed and publishing."""

from __future__ import annotations

import logging

from portal.announcements.schemas import AnnouncementCreate
from portal.client.base import DataClient
from portal.client.query import ANNOUNCEMENTS, Query
from portal.client.rows import Announcement, Profile
from portal.common.validation import require_fields
from portal.common.visibility import announcement_scope, filter_visible
from portal.dashboard.service import DashboardService

logger = logging.getLogger(__name__)


class AnnouncementService:

    @staticmethod
    async def list_announcements(client: DataClient, viewer: Profile) -> list[Announcement]:
        """Company-wide and own-department announcements (all for super admins), newest first."""
        query = announcement_scope(viewer).apply(Query(
            table=ANNOUNCEMENTS,
            embed=["author"],
            order_by="-created_at",
        ))
        result = await client.select(query)
        return filter_visible(viewer, result.rows)

    @staticmethod
    async def publish(
        client: DataClient,
        dashboard: DashboardService,
        author: Profile,
        data: AnnouncementCreate,
    ) -> Announcement:
        require_fields(data.model_dump(), "title", "content")

        announcement = await client.insert(ANNOUNCEMENTS, {
            "title": data.title.strip(),
            "content": data.content.strip(),
            "author_id": author.id,
            "department": data.department,
            "attachment_url": data.attachment_url,
            "is_priority": data.is_priority,
        })
        # Every user's dashboard counts announcements
        dashboard.invalidate_cache("global")
        logger.info(
            "Announcement %s published by %s (department=%s)",
            announcement.id, author.id, announcement.department or "all",
        )
        return announcement
