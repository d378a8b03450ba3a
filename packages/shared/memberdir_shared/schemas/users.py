"""Profile schemas (onboarding and admin user management)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from .common import Role


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ProfileUpdateRequest(BaseModel):
    """Onboarding / self-service profile update. Omitted fields are left unchanged."""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    job_title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    linkedin_account: Optional[str] = Field(default=None, max_length=500)
    avatar_url: Optional[str] = Field(default=None, max_length=2000)


class RoleUpdateRequest(BaseModel):
    """Change a user's access role (Admin only)."""
    role: Role


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ProfileResponse(BaseModel):
    """Single profile response."""
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    job_title: Optional[str] = None
    linkedin_account: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Role
    is_complete: bool = False
    created_at: Optional[datetime] = None


class ProfileListResponse(BaseModel):
    """List of profiles (admin user management)."""
    data: List[ProfileResponse]
