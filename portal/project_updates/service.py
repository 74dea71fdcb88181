"""Project update service — field reports and their review."""

from __future__ import annotations

import logging
import uuid

from portal.client.base import DataClient
from portal.client.query import PROJECT_UPDATES, Query
from portal.client.rows import Profile, ProjectUpdate
from portal.common.constants import PROJECT_UPDATE_TRANSITIONS, ProjectUpdateStatus, UserRole
from portal.common.exceptions import ForbiddenException
from portal.common.lookup import get_or_404
from portal.common.validation import check_transition, require_fields
from portal.common.visibility import (
    can_view_project_update,
    filter_visible,
    project_update_scope,
)
from portal.project_updates.schemas import ProjectUpdateCreate, ProjectUpdateReview

logger = logging.getLogger(__name__)


class ProjectUpdateService:

    @staticmethod
    async def list_updates(client: DataClient, viewer: Profile) -> list[ProjectUpdate]:
        query = project_update_scope(viewer).apply(Query(
            table=PROJECT_UPDATES,
            embed=["employee"],
            order_by="-created_at",
        ))
        result = await client.select(query)
        return filter_visible(viewer, result.rows)

    @staticmethod
    async def submit(
        client: DataClient,
        employee: Profile,
        data: ProjectUpdateCreate,
    ) -> ProjectUpdate:
        """File a report; it goes straight to ``submitted``."""
        require_fields(data.model_dump(), "title", "description", "work_location")

        update = await client.insert(PROJECT_UPDATES, {
            "employee_id": employee.id,
            "title": data.title.strip(),
            "description": data.description.strip(),
            "work_location": data.work_location,
            "images": data.images or None,
            "status": ProjectUpdateStatus.submitted,
        })
        logger.info("Project update %s submitted by %s", update.id, employee.id)
        return update

    @staticmethod
    async def review(
        client: DataClient,
        update_id: uuid.UUID,
        reviewer: Profile,
        data: ProjectUpdateReview,
    ) -> ProjectUpdate:
        current = await get_or_404(
            client, PROJECT_UPDATES, update_id, "Project update", embed=["employee"],
        )
        if reviewer.role != UserRole.super_admin:
            if current.employee_id == reviewer.id:
                raise ForbiddenException("You cannot review your own project update.")
            if not can_view_project_update(reviewer, current):
                raise ForbiddenException("You can only review updates from your department.")
        target = ProjectUpdateStatus(data.status)
        check_transition(PROJECT_UPDATE_TRANSITIONS, current.status, target)

        update = await client.update(PROJECT_UPDATES, {"status": target}, match={"id": update_id})
        logger.info("Project update %s set to %s by %s", update_id, target.value, reviewer.id)
        return update
