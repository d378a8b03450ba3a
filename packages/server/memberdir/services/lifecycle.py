"""
Membership lifecycle: join requests and their moderation.

State machine per (user, organization):

    (no row) --request (user)--> pending
    (no row) --request (admin)-> approved
    pending  --approve (admin)-> approved
    pending  --reject (admin)--> (no row)
    pending  --cancel (self)---> (no row)
    approved --leave (self)----> (no row)

Rejection deletes the row, so afterwards it is indistinguishable from never
having asked; the ``membership.rejected`` log event is the only trace.
"""

from __future__ import annotations

from typing import Iterable, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from memberdir.core.auth import UserIdentity, ensure_admin
from memberdir.core.errors import Forbidden
from memberdir.models.profile import Profile
from memberdir.services import membership_store
from memberdir.services.organizations import get_organization
from memberdir.services.profiles import is_profile_complete
from memberdir.services.scope import resolve_scope
from memberdir_shared.schemas.common import MembershipStatus
from memberdir_shared.schemas.organizations import (
    ADMIN_ACTIONS,
    MEMBERSHIP_TRANSITIONS,
    MembershipAction,
    PendingRequestResponse,
)

log = structlog.get_logger()

_EVENTS = {
    MembershipAction.APPROVE: "membership.approved",
    MembershipAction.REJECT: "membership.rejected",
    MembershipAction.CANCEL: "membership.cancelled",
    MembershipAction.LEAVE: "membership.left",
}


async def _transition(
    session: AsyncSession,
    identity: UserIdentity,
    action: MembershipAction,
    user_id: str,
    org_id: int,
) -> None:
    if action in ADMIN_ACTIONS:
        ensure_admin(identity)

    from_status, to_status = MEMBERSHIP_TRANSITIONS[action]
    if to_status is None:
        await membership_store.delete_membership(session, user_id, org_id, expected_status=from_status)
    else:
        await membership_store.update_status(session, user_id, org_id, from_status, to_status)

    log.info(_EVENTS[action], user_id=user_id, org_id=org_id, by=identity.id)


async def request_to_join(
    session: AsyncSession, identity: UserIdentity, org_id: int
) -> MembershipStatus:
    """Ask to join an organization. Admins are approved immediately."""
    await get_organization(session, org_id)

    profile = await session.get(Profile, identity.id)
    if not is_profile_complete(profile):
        raise Forbidden("Complete your profile before requesting to join an organization")

    status = MembershipStatus.APPROVED if identity.is_admin else MembershipStatus.PENDING
    await membership_store.upsert_membership(session, identity.id, org_id, status)
    log.info("membership.requested", user_id=identity.id, org_id=org_id, status=status.value)
    return status


async def cancel_request(session: AsyncSession, identity: UserIdentity, org_id: int) -> None:
    """Withdraw the caller's own pending request."""
    await _transition(session, identity, MembershipAction.CANCEL, identity.id, org_id)


async def leave_organization(session: AsyncSession, identity: UserIdentity, org_id: int) -> None:
    """Leave an organization the caller is an approved member of."""
    await _transition(session, identity, MembershipAction.LEAVE, identity.id, org_id)


async def approve_request(
    session: AsyncSession, identity: UserIdentity, user_id: str, org_id: int
) -> None:
    await _transition(session, identity, MembershipAction.APPROVE, user_id, org_id)


async def reject_request(
    session: AsyncSession, identity: UserIdentity, user_id: str, org_id: int
) -> None:
    """Reject a pending request. An approved member cannot be rejected."""
    await _transition(session, identity, MembershipAction.REJECT, user_id, org_id)


async def membership_map(session: AsyncSession, identity: UserIdentity) -> dict[int, MembershipStatus]:
    """The caller's own memberships keyed by organization id."""
    rows = await membership_store.list_by_user(session, identity.id)
    return {m.organization_id: MembershipStatus(m.status) for m in rows}


async def list_pending_requests(
    session: AsyncSession,
    identity: UserIdentity,
    org_ids: Optional[Iterable[int]] = None,
) -> list[PendingRequestResponse]:
    """Pending join requests in the organizations the caller may see, with the requesters' names."""
    scope = await resolve_scope(session, identity, org_ids)
    if scope.is_empty:
        return []

    rows = await membership_store.list_by_org_ids(
        session,
        None if scope.unrestricted else scope.org_ids,
        identity,
        status=MembershipStatus.PENDING,
    )
    if not rows:
        return []

    result = await session.execute(
        select(Profile).where(Profile.id.in_(sorted({m.user_id for m in rows})))
    )
    profiles = {p.id: p for p in result.scalars().all()}

    out = []
    for m in rows:
        p = profiles.get(m.user_id)
        out.append(
            PendingRequestResponse(
                user_id=m.user_id,
                organization_id=m.organization_id,
                first_name=p.first_name if p else None,
                last_name=p.last_name if p else None,
                job_title=p.job_title if p else None,
                email=p.email if p else None,
                requested_at=m.created_at,
            )
        )
    return out
