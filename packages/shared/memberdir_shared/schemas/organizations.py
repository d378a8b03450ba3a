"""
Organization and membership schemas shared by the server and its clients.

Covers: org CRUD request/response, membership rows, membership lifecycle
transitions, aggregate count maps.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .common import MembershipStatus


# ---------------------------------------------------------------------------
# Lifecycle transitions
# ---------------------------------------------------------------------------

class MembershipAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    LEAVE = "leave"


# (required current status, resulting status); None as a result means the row is deleted.
MEMBERSHIP_TRANSITIONS: dict[MembershipAction, tuple[MembershipStatus, Optional[MembershipStatus]]] = {
    MembershipAction.APPROVE: (MembershipStatus.PENDING, MembershipStatus.APPROVED),
    MembershipAction.REJECT: (MembershipStatus.PENDING, None),
    MembershipAction.CANCEL: (MembershipStatus.PENDING, None),
    MembershipAction.LEAVE: (MembershipStatus.APPROVED, None),
}

# Only these actions require the administrator role.
ADMIN_ACTIONS = frozenset({MembershipAction.APPROVE, MembershipAction.REJECT})


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="Organization display name")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgResponse(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class OrgListResponse(BaseModel):
    data: list[OrgResponse]


class MembershipResponse(BaseModel):
    user_id: str
    organization_id: int
    status: MembershipStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PendingRequestResponse(BaseModel):
    """A pending join request together with the requester's display fields."""
    user_id: str
    organization_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    job_title: Optional[str] = None
    email: Optional[str] = None
    requested_at: Optional[datetime] = None


class PendingRequestListResponse(BaseModel):
    data: list[PendingRequestResponse]
