"""
Caller membership endpoints.

GET    /api/v1/memberships/me                           The caller's memberships as {orgId: status}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from memberdir.core.auth import UserIdentity, get_identity
from memberdir.core.database import get_session
from memberdir.services import lifecycle
from memberdir_shared.schemas.common import MembershipStatus

router = APIRouter()


@router.get("/me", response_model=dict[int, MembershipStatus], tags=["Memberships"])
async def my_memberships(
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Pending and approved memberships of the caller. Absent orgs have no relationship."""
    return await lifecycle.membership_map(session, identity)
