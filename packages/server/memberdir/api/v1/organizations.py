"""
Organization and membership API endpoints.

GET    /api/v1/orgs                                     List organizations
POST   /api/v1/orgs                                     Create an organization (Admin)
GET    /api/v1/orgs/available                           Orgs the caller has no membership in
GET    /api/v1/orgs/member-counts                       Approved members per org
GET    /api/v1/orgs/pending-counts                      Pending requests per org (scoped)
GET    /api/v1/orgs/{orgId}                             Get an organization
DELETE /api/v1/orgs/{orgId}                             Delete org and its memberships (Admin)
GET    /api/v1/orgs/{orgId}/members                     Approved members (scoped)
GET    /api/v1/orgs/{orgId}/requests                    Pending requests (scoped)
POST   /api/v1/orgs/{orgId}/join                        Request to join
DELETE /api/v1/orgs/{orgId}/join                        Cancel own pending request
POST   /api/v1/orgs/{orgId}/leave                       Leave (approved members)
POST   /api/v1/orgs/{orgId}/requests/{userId}/approve   Approve a request (Admin)
POST   /api/v1/orgs/{orgId}/requests/{userId}/reject    Reject a request (Admin)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from memberdir.core.auth import UserIdentity, get_identity, require_admin
from memberdir.core.database import get_session
from memberdir.services import counters, lifecycle
from memberdir.services import organizations as org_service
from memberdir.services.profiles import to_response
from memberdir.services.scope import resolve_scope
from memberdir_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgListResponse,
    OrgResponse,
    PendingRequestListResponse,
)
from memberdir_shared.schemas.users import ProfileListResponse

router = APIRouter()


# ---------------------------------------------------------------------------
# Collection routes
# ---------------------------------------------------------------------------

@router.get("", response_model=OrgListResponse, tags=["Organizations"])
async def list_orgs(
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """List all organizations, ordered by name."""
    orgs = await org_service.list_organizations(session)
    return OrgListResponse(data=[OrgResponse.model_validate(o) for o in orgs])


@router.post("", response_model=OrgResponse, status_code=201, tags=["Organizations"])
async def create_org(
    body: OrgCreateRequest,
    identity: UserIdentity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Create a new organization (Admin only)."""
    org = await org_service.create_organization(session, identity, body.name)
    return OrgResponse.model_validate(org)


@router.get("/available", response_model=OrgListResponse, tags=["Organizations"])
async def list_available_orgs(
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Organizations the caller can still ask to join."""
    orgs = await org_service.list_available_organizations(session, identity)
    return OrgListResponse(data=[OrgResponse.model_validate(o) for o in orgs])


@router.get("/member-counts", response_model=dict[int, int], tags=["Organizations"])
async def member_counts(
    organization_ids: list[int] = Query(default=[], alias="organizationIds"),
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Approved member count per organization (all orgs when no filter is given)."""
    return await counters.member_counts(session, organization_ids or None)


@router.get("/pending-counts", response_model=dict[int, int], tags=["Organizations"])
async def pending_counts(
    organization_ids: list[int] = Query(default=[], alias="organizationIds"),
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Pending request count per organization, limited to the caller's scope."""
    scope = await resolve_scope(session, identity, organization_ids)
    if scope.is_empty:
        return {}
    return await counters.pending_counts(session, None if scope.unrestricted else scope.org_ids)


# ---------------------------------------------------------------------------
# Single-organization routes
# ---------------------------------------------------------------------------

@router.get("/{orgId}", response_model=OrgResponse, tags=["Organizations"])
async def get_org(
    orgId: int,
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    org = await org_service.get_organization(session, orgId)
    return OrgResponse.model_validate(org)


@router.delete("/{orgId}", status_code=204, tags=["Organizations"])
async def delete_org(
    orgId: int,
    identity: UserIdentity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Delete an organization and every membership in it (Admin only)."""
    await org_service.delete_organization(session, identity, orgId)
    return Response(status_code=204)


@router.get("/{orgId}/members", response_model=ProfileListResponse, tags=["Organizations"])
async def list_members(
    orgId: int,
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Approved members of the org; empty unless the caller may see it."""
    profiles = await org_service.list_organization_members(session, identity, orgId)
    return ProfileListResponse(data=[to_response(p) for p in profiles])


@router.get("/{orgId}/requests", response_model=PendingRequestListResponse, tags=["Memberships"])
async def list_requests(
    orgId: int,
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Pending join requests for the org, as visible to the caller."""
    await org_service.get_organization(session, orgId)
    items = await lifecycle.list_pending_requests(session, identity, [orgId])
    return PendingRequestListResponse(data=items)


# ---------------------------------------------------------------------------
# Membership lifecycle
# ---------------------------------------------------------------------------

@router.post("/{orgId}/join", status_code=204, tags=["Memberships"])
async def request_to_join(
    orgId: int,
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Request to join. 409 if a request or membership already exists."""
    await lifecycle.request_to_join(session, identity, orgId)
    return Response(status_code=204)


@router.delete("/{orgId}/join", status_code=204, tags=["Memberships"])
async def cancel_request(
    orgId: int,
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Withdraw the caller's pending request. 404 if there is none."""
    await lifecycle.cancel_request(session, identity, orgId)
    return Response(status_code=204)


@router.post("/{orgId}/leave", status_code=204, tags=["Memberships"])
async def leave_org(
    orgId: int,
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Leave the org. 404 unless the caller is an approved member."""
    await lifecycle.leave_organization(session, identity, orgId)
    return Response(status_code=204)


@router.post("/{orgId}/requests/{userId}/approve", status_code=204, tags=["Memberships"])
async def approve_request(
    orgId: int,
    userId: str,
    identity: UserIdentity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Approve a pending request (Admin only)."""
    await lifecycle.approve_request(session, identity, userId, orgId)
    return Response(status_code=204)


@router.post("/{orgId}/requests/{userId}/reject", status_code=204, tags=["Memberships"])
async def reject_request(
    orgId: int,
    userId: str,
    identity: UserIdentity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Reject a pending request (Admin only). The request is deleted."""
    await lifecycle.reject_request(session, identity, userId, orgId)
    return Response(status_code=204)
