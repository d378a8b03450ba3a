"""Directory search schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    """One directory row.

    ``role`` carries the member's job title: the directory labels people by
    what they do, not by their access level.
    """
    id: str
    name: str
    role: str | None = None
    avatar: str
    fallback: str


class FilterOptions(BaseModel):
    job_titles: list[str] = Field(default_factory=list, serialization_alias="jobTitles")
    roles: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}
