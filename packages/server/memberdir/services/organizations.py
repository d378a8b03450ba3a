"""
Organization service: business logic for org CRUD and member listing.
"""

from __future__ import annotations

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from memberdir.core.auth import UserIdentity, ensure_admin
from memberdir.core.errors import NotFound
from memberdir.models.membership import Membership
from memberdir.models.organization import Organization
from memberdir.models.profile import Profile
from memberdir.services import membership_store
from memberdir.services.scope import resolve_scope
from memberdir_shared.schemas.common import MembershipStatus

log = structlog.get_logger()


async def list_organizations(session: AsyncSession) -> list[Organization]:
    result = await session.execute(select(Organization).order_by(Organization.name, Organization.id))
    return list(result.scalars().all())


async def get_organization(session: AsyncSession, org_id: int) -> Organization:
    """Get an org by id; raises 404 if not found."""
    org = await session.get(Organization, org_id)
    if not org:
        raise NotFound("Organization not found")
    return org


async def create_organization(
    session: AsyncSession, identity: UserIdentity, name: str
) -> Organization:
    """Create an organization (Admin only)."""
    ensure_admin(identity)
    org = Organization(name=name.strip())
    session.add(org)
    await session.flush()
    log.info("org.created", org_id=org.id, name=org.name, creator=identity.id)
    return org


async def delete_organization(
    session: AsyncSession, identity: UserIdentity, org_id: int
) -> None:
    """Delete an organization (Admin only).

    Membership rows go first, then the organization row, in the same
    transaction; the reverse order would leave orphaned memberships.
    """
    ensure_admin(identity)
    await get_organization(session, org_id)

    removed = await membership_store.delete_for_organization(session, org_id)
    result = await session.execute(delete(Organization).where(Organization.id == org_id))
    if result.rowcount == 0:
        raise NotFound("Organization not found")

    log.info("org.deleted", org_id=org_id, memberships_removed=removed, by=identity.id)


async def list_available_organizations(
    session: AsyncSession, identity: UserIdentity
) -> list[Organization]:
    """Organizations where the caller has no membership row (eligible to request)."""
    mine = select(Membership.organization_id).where(Membership.user_id == identity.id)
    result = await session.execute(
        select(Organization)
        .where(Organization.id.not_in(mine))
        .order_by(Organization.name, Organization.id)
    )
    return list(result.scalars().all())


async def list_organization_members(
    session: AsyncSession, identity: UserIdentity, org_id: int
) -> list[Profile]:
    """Approved members of an org; empty when the org is outside the caller's scope."""
    await get_organization(session, org_id)
    scope = await resolve_scope(session, identity, [org_id])
    if scope.is_empty:
        return []

    result = await session.execute(
        select(Profile)
        .join(Membership, Membership.user_id == Profile.id)
        .where(
            Membership.organization_id == org_id,
            Membership.status == MembershipStatus.APPROVED.value,
        )
        .order_by(Profile.first_name, Profile.last_name, Profile.id)
    )
    return list(result.scalars().all())
