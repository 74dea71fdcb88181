"""Admin Pydantic schemas — profile management and headcount stats."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from portal.common.constants import DEFAULT_JOB_TITLE, DEFAULT_LOCATION, UserRole


# ── Profile management ──────────────────────────────────────────────

class ProfileCreate(BaseModel):
    # Presence of email, full_name and department is checked by the service
    email: Optional[str] = Field(None, max_length=255)
    full_name: Optional[str] = Field(None, max_length=200)
    department: Optional[str] = Field(None, max_length=100)
    role: UserRole = UserRole.employee
    job_title: str = Field(DEFAULT_JOB_TITLE, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    location: str = Field(DEFAULT_LOCATION, max_length=100)
    joining_date: Optional[date] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    role: Optional[UserRole] = None
    department: Optional[str] = Field(default=None, min_length=1, max_length=100)
    job_title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)
    location: Optional[str] = Field(default=None, min_length=1, max_length=100)
    joining_date: Optional[date] = None

    @field_validator("full_name", "role", "department", "job_title", "location", "joining_date")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("This field cannot be null.")
        return value


# ── Stats ───────────────────────────────────────────────────────────

class AdminStats(BaseModel):
    total: int = 0
    active: int = 0
    inactive: int = 0
    admins: int = 0
    managers: int = 0
    employees: int = 0
