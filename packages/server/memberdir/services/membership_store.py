"""
Membership store: the (user, organization, status) relation.

Every write is a single conditional statement so the database arbitrates
concurrent requests: the composite primary key rejects a second join request,
and status-guarded UPDATE/DELETE statements match at most one row.
"""

from __future__ import annotations

from typing import Iterable, Optional

import structlog
from sqlalchemy import delete, insert, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlmodel import select

from memberdir.core.auth import UserIdentity
from memberdir.core.errors import Conflict, NotFound
from memberdir.models.membership import Membership
from memberdir_shared.schemas.common import MembershipStatus

log = structlog.get_logger()


def _status_value(status: MembershipStatus | str) -> str:
    return MembershipStatus(status).value


async def upsert_membership(
    session: AsyncSession,
    user_id: str,
    org_id: int,
    status: MembershipStatus,
) -> None:
    """Insert a membership row; an existing row for the pair raises Conflict.

    The insert must be the first write of the session's transaction: a
    uniqueness violation rolls the transaction back.
    """
    try:
        await session.execute(
            insert(Membership).values(
                user_id=user_id,
                organization_id=org_id,
                status=_status_value(status),
            )
        )
        await session.flush()
    except IntegrityError:
        await session.rollback()
        log.info("membership.duplicate", user_id=user_id, org_id=org_id)
        raise Conflict("A membership or request for this organization already exists")


async def update_status(
    session: AsyncSession,
    user_id: str,
    org_id: int,
    from_status: MembershipStatus,
    to_status: MembershipStatus,
) -> None:
    """Move a row from ``from_status`` to ``to_status``; NotFound if no row is in ``from_status``."""
    result = await session.execute(
        update(Membership)
        .where(
            Membership.user_id == user_id,
            Membership.organization_id == org_id,
            Membership.status == _status_value(from_status),
        )
        .values(status=_status_value(to_status))
    )
    if result.rowcount == 0:
        raise NotFound(f"No {_status_value(from_status)} membership for this user and organization")


async def delete_membership(
    session: AsyncSession,
    user_id: str,
    org_id: int,
    expected_status: Optional[MembershipStatus] = None,
) -> None:
    """Delete the row for the pair, optionally only when it is in ``expected_status``."""
    stmt = delete(Membership).where(
        Membership.user_id == user_id,
        Membership.organization_id == org_id,
    )
    if expected_status is not None:
        stmt = stmt.where(Membership.status == _status_value(expected_status))
    result = await session.execute(stmt)
    if result.rowcount == 0:
        if expected_status is None:
            raise NotFound("No membership for this user and organization")
        raise NotFound(f"No {_status_value(expected_status)} membership for this user and organization")


async def delete_for_organization(session: AsyncSession, org_id: int) -> int:
    """Remove every membership row of an organization. Returns the number removed."""
    result = await session.execute(
        delete(Membership).where(Membership.organization_id == org_id)
    )
    return result.rowcount


async def approved_org_ids(session: AsyncSession, user_id: str) -> list[int]:
    """Organizations in which the user is an approved member."""
    result = await session.execute(
        select(Membership.organization_id)
        .where(
            Membership.user_id == user_id,
            Membership.status == MembershipStatus.APPROVED.value,
        )
        .order_by(Membership.organization_id)
    )
    return list(result.scalars().all())


async def list_by_user(session: AsyncSession, user_id: str) -> list[Membership]:
    result = await session.execute(
        select(Membership)
        .where(Membership.user_id == user_id)
        .order_by(Membership.organization_id)
    )
    return list(result.scalars().all())


async def list_by_org_ids(
    session: AsyncSession,
    org_ids: Optional[Iterable[int]],
    viewer: UserIdentity,
    status: Optional[MembershipStatus] = None,
) -> list[Membership]:
    """Membership rows of the given organizations that ``viewer`` may see.

    ``org_ids`` of None means every organization. Admins see every row.
    Anyone else sees rows inside organizations where they are approved, plus
    their own rows.
    """
    stmt = select(Membership)
    if org_ids is not None:
        org_ids = list(org_ids)
        if not org_ids:
            return []
        stmt = stmt.where(Membership.organization_id.in_(org_ids))
    if status is not None:
        stmt = stmt.where(Membership.status == _status_value(status))
    if not viewer.is_admin:
        own = aliased(Membership)
        visible_orgs = select(own.organization_id).where(
            own.user_id == viewer.id,
            own.status == MembershipStatus.APPROVED.value,
        )
        stmt = stmt.where(
            or_(
                Membership.organization_id.in_(visible_orgs),
                Membership.user_id == viewer.id,
            )
        )
    result = await session.execute(
        stmt.order_by(Membership.organization_id, Membership.created_at, Membership.user_id)
    )
    return list(result.scalars().all())
