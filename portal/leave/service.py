"""Leave service — filing requests and the manager decision.

Listing goes through the dashboard service's per-user cache; writes clear
the cached entries of every user the change touches.
"""

from __future__ import annotations

import logging
import uuid

from portal.client.base import DataClient
from portal.client.query import LEAVE_REQUESTS
from portal.client.rows import LeaveRequest, Profile
from portal.common.constants import LEAVE_TRANSITIONS, LeaveStatus
from portal.common.exceptions import ValidationException
from portal.common.lookup import get_or_404
from portal.common.validation import check_transition, require_fields
from portal.common.visibility import filter_visible
from portal.dashboard.service import DashboardService
from portal.leave.schemas import LeaveDecision, LeaveRequestCreate

logger = logging.getLogger(__name__)


def count_days(data: LeaveRequestCreate) -> int:
    """Inclusive day span of the request."""
    return (data.end_date - data.start_date).days + 1


class LeaveService:
    """Async operations for leave requests."""

    # ── List ────────────────────────────────────────────────────────

    @staticmethod
    async def list_leave_requests(
        dashboard: DashboardService,
        viewer: Profile,
    ) -> list[LeaveRequest]:
        rows = await dashboard.get_leave_requests(viewer.id, viewer.role)
        return filter_visible(viewer, rows)

    # ── Apply ───────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        client: DataClient,
        dashboard: DashboardService,
        employee: Profile,
        data: LeaveRequestCreate,
    ) -> LeaveRequest:
        require_fields(data.model_dump(), "reason")
        if data.end_date < data.start_date:
            raise ValidationException({"end_date": ["End date must not be before the start date."]})

        leave = await client.insert(LEAVE_REQUESTS, {
            "employee_id": employee.id,
            "leave_type": data.leave_type,
            "start_date": data.start_date,
            "end_date": data.end_date,
            "days_count": count_days(data),
            "reason": data.reason.strip(),
            "status": LeaveStatus.pending,
        })
        dashboard.invalidate_cache("user", employee.id)
        dashboard.invalidate_cache("leaves")
        logger.info("Leave request %s filed by %s (%d days)", leave.id, employee.id, leave.days_count)
        return leave

    # ── Decide ──────────────────────────────────────────────────────

    @staticmethod
    async def decide(
        client: DataClient,
        dashboard: DashboardService,
        request_id: uuid.UUID,
        manager: Profile,
        data: LeaveDecision,
    ) -> LeaveRequest:
        """Approve or reject a pending request on behalf of *manager*."""
        current = await get_or_404(client, LEAVE_REQUESTS, request_id, "Leave request")
        target = LeaveStatus(data.status)
        check_transition(LEAVE_TRANSITIONS, current.status, target)

        leave = await client.update(
            LEAVE_REQUESTS,
            {
                "status": target,
                "manager_id": manager.id,
                "manager_comments": data.manager_comments,
            },
            match={"id": request_id},
        )
        for user_id in {current.employee_id, manager.id}:
            dashboard.invalidate_cache("user", user_id)
        dashboard.invalidate_cache("leaves")
        logger.info("Leave request %s %s by %s", request_id, target.value, manager.id)
        return leave
