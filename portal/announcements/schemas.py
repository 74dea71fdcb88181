"""Announcement Pydantic v2 schemas — request bodies."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

COMPANY_WIDE = "company-wide"


class AnnouncementCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = None
    department: Optional[str] = Field(
        None, max_length=100, description=f"Omit (or '{COMPANY_WIDE}') for company-wide",
    )
    attachment_url: Optional[str] = None
    is_priority: bool = False

    @field_validator("department")
    @classmethod
    def _company_wide(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip() or value == COMPANY_WIDE:
            return None
        return value
