"""Profile Pydantic v2 schemas — self-service edits."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class ProfileSelfUpdate(BaseModel):
    """Fields a user may change on their own profile. Omitted fields are left as-is."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    job_title: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, min_length=1, max_length=100)
    profile_picture: Optional[str] = None

    # Runs only for values sent in the body, so omitted fields stay untouched
    @field_validator("full_name", "job_title", "location")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("This field cannot be null.")
        return value
