"""
Directory queries: member search and facet discovery.

Both queries take an ``OrgScope`` from ``services.scope`` and apply it the
same way, so every facet value offered by ``list_filter_options`` matches at
least one row of ``list_users`` under the same scope.
"""

from __future__ import annotations

from typing import Iterable, Optional

import structlog
from sqlalchemy import Select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from memberdir.core.config import get_settings
from memberdir.models.membership import Membership
from memberdir.models.profile import Profile
from memberdir.services.scope import OrgScope
from memberdir_shared.schemas.common import MembershipStatus
from memberdir_shared.schemas.directory import FilterOptions, UserSummary

log = structlog.get_logger()


def _scoped(stmt: Select, scope: OrgScope) -> Select:
    """Restrict a Profile query to approved members of the scope's organizations."""
    if scope.unrestricted:
        return stmt
    members = select(Membership.user_id).where(
        Membership.organization_id.in_(scope.org_ids),
        Membership.status == MembershipStatus.APPROVED.value,
    )
    return stmt.where(Profile.id.in_(members))


def _initials(first: Optional[str], last: Optional[str]) -> str:
    return f"{(first or '')[:1]}{(last or '')[:1]}".upper()


def to_summary(profile: Profile, default_avatar: str) -> UserSummary:
    name = " ".join(part for part in (profile.first_name, profile.last_name) if part)
    return UserSummary(
        id=profile.id,
        name=name,
        role=profile.job_title,
        avatar=profile.avatar_url or default_avatar,
        fallback=_initials(profile.first_name, profile.last_name),
    )


async def list_users(
    session: AsyncSession,
    scope: OrgScope,
    query: Optional[str] = None,
    roles: Optional[Iterable[str]] = None,
    job_titles: Optional[Iterable[str]] = None,
    *,
    default_avatar: Optional[str] = None,
) -> list[UserSummary]:
    """Search the directory within ``scope``."""
    if scope.is_empty:
        return []

    stmt = _scoped(select(Profile), scope)

    query = (query or "").strip()
    if query:
        stmt = stmt.where(
            or_(
                Profile.first_name.icontains(query, autoescape=True),
                Profile.last_name.icontains(query, autoescape=True),
            )
        )

    roles = [r for r in (roles or []) if r]
    if roles:
        stmt = stmt.where(Profile.role.in_(roles))

    job_titles = [t for t in (job_titles or []) if t]
    if job_titles:
        stmt = stmt.where(Profile.job_title.in_(job_titles))

    stmt = stmt.order_by(Profile.first_name, Profile.last_name, Profile.id)
    result = await session.execute(stmt)
    profiles = result.scalars().all()
    log.debug("directory.listed", count=len(profiles), scoped=scope.apply_filter)

    avatar = default_avatar or get_settings().default_avatar_url
    return [to_summary(p, avatar) for p in profiles]


async def list_filter_options(session: AsyncSession, scope: OrgScope) -> FilterOptions:
    """Distinct non-null job titles and roles among in-scope profiles."""
    if scope.is_empty:
        return FilterOptions(job_titles=[], roles=[])

    result = await session.execute(
        _scoped(select(Profile.job_title, Profile.role), scope)
    )
    rows = result.all()
    job_titles = sorted({jt for jt, _ in rows if jt})
    roles = sorted({r for _, r in rows if r})
    return FilterOptions(job_titles=job_titles, roles=roles)


async def get_visible_profile(
    session: AsyncSession, scope: OrgScope, user_id: str
) -> Optional[Profile]:
    """A single profile, or None when it is outside ``scope``."""
    if scope.is_empty:
        return None
    result = await session.execute(_scoped(select(Profile).where(Profile.id == user_id), scope))
    return result.scalars().first()
