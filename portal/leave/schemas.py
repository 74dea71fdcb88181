"""Leave Pydantic v2 schemas — request bodies.

Responses use ``portal.client.rows.LeaveRequest`` directly.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field

from portal.common.constants import LeaveType


class LeaveRequestCreate(BaseModel):
    """Payload for filing a leave request."""

    leave_type: LeaveType
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    reason: Optional[str] = Field(None, max_length=1000)


class LeaveDecision(BaseModel):
    """Approve or reject a pending request."""

    status: Literal["approved", "rejected"]
    manager_comments: Optional[str] = Field(None, max_length=1000)
