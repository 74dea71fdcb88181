"""Task Pydantic v2 schemas — request bodies."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from portal.common.constants import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    # Presence of title, description and assigned_to is checked by the service
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    assigned_to: Optional[uuid.UUID] = None
    due_date: Optional[date] = None
    priority: TaskPriority = TaskPriority.medium


class TaskStatusUpdate(BaseModel):
    status: TaskStatus
