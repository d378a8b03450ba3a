"""
Aggregate counters derived from membership rows.

Counts are recomputed with GROUP BY on every call; nothing is cached or
stored, so a count can only be as stale as the response carrying it.
"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from memberdir.models.membership import Membership
from memberdir_shared.schemas.common import MembershipStatus


async def _counts(
    session: AsyncSession,
    status: MembershipStatus,
    org_ids: Optional[Iterable[int]],
) -> dict[int, int]:
    stmt = (
        select(Membership.organization_id, func.count())
        .where(Membership.status == status.value)
        .group_by(Membership.organization_id)
    )
    if org_ids is not None:
        org_ids = list(org_ids)
        if not org_ids:
            return {}
        stmt = stmt.where(Membership.organization_id.in_(org_ids))

    result = await session.execute(stmt)
    return {org_id: count for org_id, count in result.all()}


async def member_counts(
    session: AsyncSession, org_ids: Optional[Iterable[int]] = None
) -> dict[int, int]:
    """Approved members per organization. Organizations without members are omitted."""
    return await _counts(session, MembershipStatus.APPROVED, org_ids)


async def pending_counts(
    session: AsyncSession, org_ids: Optional[Iterable[int]] = None
) -> dict[int, int]:
    """Pending join requests per organization."""
    return await _counts(session, MembershipStatus.PENDING, org_ids)
