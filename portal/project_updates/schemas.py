"""Project update Pydantic v2 schemas — request bodies."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class ProjectUpdateCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    work_location: Optional[str] = Field(None, max_length=100)
    images: list[str] = Field(default_factory=list, description="Image URLs or data URIs, in display order")


class ProjectUpdateReview(BaseModel):
    """Approve a submitted update or send it back to draft."""

    status: Literal["approved", "draft"]
