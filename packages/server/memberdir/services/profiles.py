"""
Profile service: provisioning, onboarding updates and admin role management.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from memberdir.core.auth import UserIdentity, ensure_admin
from memberdir.core.errors import NotFound
from memberdir.models.profile import Profile
from memberdir_shared.schemas.common import Role
from memberdir_shared.schemas.users import ProfileResponse, ProfileUpdateRequest

log = structlog.get_logger()

# Fields the onboarding form must fill before the member may request to join.
REQUIRED_FIELDS = ("first_name", "last_name", "job_title")


def is_profile_complete(profile: Optional[Profile]) -> bool:
    if profile is None:
        return False
    return all((getattr(profile, f) or "").strip() for f in REQUIRED_FIELDS)


def to_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        email=profile.email,
        first_name=profile.first_name,
        last_name=profile.last_name,
        job_title=profile.job_title,
        linkedin_account=profile.linkedin_account,
        avatar_url=profile.avatar_url,
        role=Role(profile.role),
        is_complete=is_profile_complete(profile),
        created_at=profile.created_at,
    )


async def ensure_profile(
    session: AsyncSession, user_id: str, email: Optional[str]
) -> tuple[Profile, bool]:
    """Create the caller's profile on first authentication. Returns (profile, created)."""
    profile = await session.get(Profile, user_id)
    if profile:
        return profile, False

    profile = Profile(id=user_id, email=email, role=Role.USER.value)
    session.add(profile)
    await session.flush()
    log.info("profile.created", user_id=user_id)
    return profile, True


async def get_profile(session: AsyncSession, user_id: str) -> Profile:
    profile = await session.get(Profile, user_id)
    if not profile:
        raise NotFound("Profile not found")
    return profile


async def update_profile(
    session: AsyncSession,
    identity: UserIdentity,
    req: ProfileUpdateRequest,
) -> Profile:
    """Apply onboarding fields to the caller's own profile."""
    profile = await get_profile(session, identity.id)

    changes = req.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if isinstance(value, str):
            value = value.strip() or None
        setattr(profile, key, value)

    profile.updated_at = datetime.now(timezone.utc)
    session.add(profile)
    await session.flush()

    log.info(
        "profile.updated",
        user_id=identity.id,
        fields=sorted(changes),
        complete=is_profile_complete(profile),
    )
    return profile


async def update_role(
    session: AsyncSession,
    identity: UserIdentity,
    user_id: str,
    role: Role,
) -> Profile:
    """Change a user's access role (Admin only)."""
    ensure_admin(identity)
    profile = await get_profile(session, user_id)
    profile.role = role.value
    profile.updated_at = datetime.now(timezone.utc)
    session.add(profile)
    await session.flush()

    log.info("profile.role_changed", user_id=user_id, role=role.value, by=identity.id)
    return profile


async def list_profiles(session: AsyncSession, identity: UserIdentity) -> list[Profile]:
    """All profiles, for admin user management."""
    ensure_admin(identity)
    result = await session.execute(
        select(Profile).order_by(Profile.first_name, Profile.last_name, Profile.id)
    )
    return list(result.scalars().all())


async def find_by_email(session: AsyncSession, email: str) -> Optional[Profile]:
    result = await session.execute(select(Profile).where(Profile.email == email))
    return result.scalars().first()
