"""
Profile API endpoints.

GET    /api/v1/profiles/me                              Own profile (with completeness flag)
POST   /api/v1/profiles/me                              Provision own profile from the token on first sign-in
PATCH  /api/v1/profiles/me                              Onboarding / self-service update
GET    /api/v1/profiles                                 List all profiles (Admin)
GET    /api/v1/profiles/{userId}                        Profile of a member visible to the caller
PATCH  /api/v1/profiles/{userId}/role                   Change a user's role (Admin)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from memberdir.core.auth import UserIdentity, get_identity, get_token_claims, require_admin
from memberdir.core.database import get_session
from memberdir.core.errors import NotFound
from memberdir.services import directory
from memberdir.services import profiles as profile_service
from memberdir.services.scope import resolve_scope
from memberdir_shared.schemas.users import (
    ProfileListResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    RoleUpdateRequest,
)

router = APIRouter()


@router.get("/me", response_model=ProfileResponse, tags=["Profiles"])
async def get_my_profile(
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    profile = await profile_service.get_profile(session, identity.id)
    return profile_service.to_response(profile)


@router.post("/me", response_model=ProfileResponse, tags=["Profiles"])
async def provision_my_profile(
    response: Response,
    claims: dict = Depends(get_token_claims),
    session: AsyncSession = Depends(get_session),
):
    """Create the caller's profile if it does not exist yet (201), otherwise return it (200)."""
    profile, created = await profile_service.ensure_profile(
        session, claims["sub"], claims.get("email")
    )
    if created:
        response.status_code = 201
    return profile_service.to_response(profile)


@router.patch("/me", response_model=ProfileResponse, tags=["Profiles"])
async def update_my_profile(
    body: ProfileUpdateRequest,
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Fill in onboarding fields. Only the owner can edit their profile."""
    profile = await profile_service.update_profile(session, identity, body)
    return profile_service.to_response(profile)


@router.get("", response_model=ProfileListResponse, tags=["Profiles"])
async def list_profiles(
    identity: UserIdentity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """List every profile (Admin only)."""
    items = await profile_service.list_profiles(session, identity)
    return ProfileListResponse(data=[profile_service.to_response(p) for p in items])


@router.get("/{userId}", response_model=ProfileResponse, tags=["Profiles"])
async def get_profile(
    userId: str,
    identity: UserIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """A member's profile. 404 unless the caller shares an organization with them."""
    if userId == identity.id:
        profile = await profile_service.get_profile(session, userId)
        return profile_service.to_response(profile)

    scope = await resolve_scope(session, identity)
    profile = await directory.get_visible_profile(session, scope, userId)
    if not profile:
        raise NotFound("Profile not found")
    return profile_service.to_response(profile)


@router.patch("/{userId}/role", response_model=ProfileResponse, tags=["Profiles"])
async def update_role(
    userId: str,
    body: RoleUpdateRequest,
    identity: UserIdentity = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Change a user's role (Admin only). Takes effect on the user's next request."""
    profile = await profile_service.update_role(session, identity, userId, body.role)
    return profile_service.to_response(profile)
